"""Resolution helpers built on top of ``LanguageIndex``.

These turn what an editor sees in calling code (a short key inside a string
literal, a partially typed key, a key to jump to) into index lookups, using
the candidate expansion of ``infrastructure.i18n.candidates``.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from infrastructure.configuration import LanguageSettings
from infrastructure.i18n.candidates import compute_candidate_keys
from infrastructure.i18n.index import LanguageIndex
from infrastructure.i18n.models import (
    KeyLocation,
    ResolvedTranslation,
    ScopeContext,
    normalize_language,
)
from infrastructure.i18n.python_context import find_keys_in_string

GENERAL_SECTION = "general"


@dataclass(frozen=True)
class KeyCompletion:
    """One completion entry.

    Attributes:
        label: Text to insert, relative to the file section when offered there.
        key: Fully-qualified key the label stands for.
        translation: Resolved value, or None when no language translates it.
    """

    label: str
    key: str
    translation: Optional[ResolvedTranslation]

    @property
    def detail(self) -> str:
        if self.translation is None:
            return "not translated"
        return self.translation.value


def resolve_in_context(
    index: LanguageIndex,
    raw_key: str,
    settings: LanguageSettings,
    scope: Optional[ScopeContext] = None,
) -> Optional[ResolvedTranslation]:
    """Resolve a key reference written at ``scope``.

    Candidates are tried most locally scoped first; the first one the index
    resolves wins.
    """
    for candidate in compute_candidate_keys(raw_key, scope):
        resolved = index.resolve(candidate, settings)
        if resolved is not None:
            return resolved
    return None


def resolve_string_references(
    index: LanguageIndex,
    value: str,
    settings: LanguageSettings,
    scope: Optional[ScopeContext] = None,
) -> List[Tuple[str, ResolvedTranslation]]:
    """Resolve every key referenced by a string literal.

    Returns:
        ``(raw_key, translation)`` pairs in the order the keys appear; keys
        that do not resolve are left out.
    """
    results: List[Tuple[str, ResolvedTranslation]] = []
    for raw_key in find_keys_in_string(value):
        resolved = resolve_in_context(index, raw_key, settings, scope)
        if resolved is not None:
            results.append((raw_key, resolved))
    return results


def locate_translation(
    index: LanguageIndex,
    key: str,
    settings: LanguageSettings,
    language: Optional[str] = None,
) -> Optional[KeyLocation]:
    """Definition site of ``key`` for navigation.

    Looks in the preferred language first, then the default language, the
    fallback language and finally any language that defines the key.
    """
    chain = [language, settings.default_language, settings.fallback_language]
    tried = set()
    for candidate in chain:
        code = normalize_language(candidate)
        if not code or code in tried:
            continue
        tried.add(code)
        location = index.get_key_location(code, key)
        if location is not None:
            return location
    return index.get_any_key_location(key)


def locate_in_context(
    index: LanguageIndex,
    raw_key: str,
    settings: LanguageSettings,
    scope: Optional[ScopeContext] = None,
    language: Optional[str] = None,
) -> Optional[KeyLocation]:
    """Definition site of the first candidate of ``raw_key`` that has one."""
    for candidate in compute_candidate_keys(raw_key, scope):
        location = locate_translation(index, candidate, settings, language)
        if location is not None:
            return location
    return None


def complete_keys(
    index: LanguageIndex,
    typed_prefix: str,
    settings: LanguageSettings,
    file_stem: Optional[str] = None,
) -> List[KeyCompletion]:
    """Completion entries for a partially typed key.

    Without a dot in ``typed_prefix`` and with a known file stem, only keys
    of the file's section (offered relative to it) and of the ``general``
    section are suggested. Otherwise every key is a candidate. Entries are
    filtered by the typed prefix and sorted by label.
    """
    prefix = typed_prefix.strip()
    scoped = bool(file_stem) and "." not in prefix
    file_section = f"{file_stem}."
    general_section = f"{GENERAL_SECTION}."

    entries = {}
    # Sorted so that on a label clash the same key always wins
    for key in sorted(index.get_all_keys()):
        if scoped:
            if key.startswith(file_section):
                label = key[len(file_section) :]
            elif key.startswith(general_section):
                label = key
            else:
                continue
        else:
            label = key

        if not label.startswith(prefix) or label in entries:
            continue
        entries[label] = KeyCompletion(
            label=label, key=key, translation=index.resolve(key, settings)
        )

    return [entries[label] for label in sorted(entries)]
