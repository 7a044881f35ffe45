"""Language guessing from file names.

Infers which language a file holds from its name and folder using an
ordered rule cascade:

1. The stem itself is a 2-5 letter code (``de.yml``).
2. The stem is ``base_lang``, ``base-lang`` or ``base.lang`` and the suffix is
   corroborated, either by another file sharing ``base`` with a different
   suffix or by matching the configured default/fallback language.
3. The parent folder is a 2-5 letter code (``de/messages.yml``).
4. Otherwise the file is untagged and belongs to the default language.

Rule 2 needs every file name of the load pass, so guessing is done in two
phases: ``build_suffix_map`` over all names, then ``guess_language`` per file.
Everything here is pure and works on names only.
"""

import re
from pathlib import PurePosixPath
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Set, Tuple

from infrastructure.i18n.models import (
    DEFAULT_LANGUAGE_CODE,
    LanguageGuess,
    normalize_language,
)

_LANGUAGE_CODE = re.compile(r"^[A-Za-z]{2,5}$")
_SUFFIXED_STEM = re.compile(r"^(?P<base>.+)[_.-](?P<lang>[A-Za-z]{2,5})$")
_YAML_EXTENSION = re.compile(r"\.ya?ml$", re.IGNORECASE)

SuffixMap = Mapping[str, FrozenSet[str]]


def _path_of(identifier: str) -> PurePosixPath:
    return PurePosixPath(identifier.replace("\\", "/"))


def file_stem(filename: str) -> str:
    """File name without folders and without its ``.yml``/``.yaml`` extension."""
    name = _path_of(filename).name
    stripped = _YAML_EXTENSION.sub("", name)
    if stripped != name:
        return stripped
    return PurePosixPath(name).stem


def is_language_code(text: str) -> bool:
    return bool(_LANGUAGE_CODE.match(text))


def split_language_suffix(stem: str) -> Optional[Tuple[str, str]]:
    """Split ``messages_de`` into ``("messages", "de")`` (both lower-case).

    Returns:
        (base, language suffix), or None when the stem has no suffix that
        looks like a language code.
    """
    match = _SUFFIXED_STEM.match(stem)
    if not match:
        return None
    return match.group("base").lower(), match.group("lang").lower()


def build_suffix_map(filenames: Iterable[str]) -> Dict[str, FrozenSet[str]]:
    """Collect, per file base name, the language suffixes seen across a load."""
    suffixes: Dict[str, Set[str]] = {}
    for filename in filenames:
        split = split_language_suffix(file_stem(filename))
        if split is not None:
            base, lang = split
            suffixes.setdefault(base, set()).add(lang)
    return {base: frozenset(langs) for base, langs in suffixes.items()}


def guess_language(
    filename: str,
    suffix_map: SuffixMap,
    default_language: Optional[str] = None,
    fallback_language: Optional[str] = None,
) -> LanguageGuess:
    """Infer the language of one file.

    Args:
        filename: File name or path (any separator style).
        suffix_map: Result of ``build_suffix_map`` over every file of the pass.
        default_language: Configured default language code.
        fallback_language: Configured fallback language code.

    Returns:
        The guessed language and whether it was encoded in the name or folder.
    """
    default = normalize_language(default_language)
    fallback = normalize_language(fallback_language)
    stem = file_stem(filename)

    if is_language_code(stem):
        return LanguageGuess(language=stem.lower(), tagged=True)

    split = split_language_suffix(stem)
    if split is not None:
        base, lang = split
        corroborated = len(suffix_map.get(base, frozenset())) >= 2
        if corroborated or lang in (default, fallback):
            return LanguageGuess(language=lang, tagged=True)

    parent = _path_of(filename).parent.name
    if parent and is_language_code(parent):
        return LanguageGuess(language=parent.lower(), tagged=True)

    return LanguageGuess(language=default or DEFAULT_LANGUAGE_CODE, tagged=False)


def guess_languages(
    filenames: Iterable[str],
    default_language: Optional[str] = None,
    fallback_language: Optional[str] = None,
) -> Dict[str, LanguageGuess]:
    """Guess the language of every file of one load pass."""
    names = list(filenames)
    suffix_map = build_suffix_map(names)
    return {
        name: guess_language(name, suffix_map, default_language, fallback_language)
        for name in names
    }
