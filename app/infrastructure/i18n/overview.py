"""Translation coverage reports.

Summaries of which keys a source file can use and how many languages
translate each of them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from infrastructure.i18n.index import LanguageIndex
from infrastructure.i18n.models import normalize_language
from infrastructure.i18n.resolvers import GENERAL_SECTION


@dataclass(frozen=True)
class KeyRow:
    key: str
    translations: int
    has_missing_translations: bool


@dataclass(frozen=True)
class KeyOverview:
    """Keys of one file section and of the ``general`` section.

    Attributes:
        file_stem: Section the file keys were taken from (None when unknown).
        languages_total: Number of loaded languages.
        file_keys: Rows for keys under ``<file_stem>.``.
        general_keys: Rows for keys under ``general.``.
        last_loaded_at: Publish time of the snapshot the rows come from.
    """

    file_stem: Optional[str]
    languages_total: int
    file_keys: List[KeyRow] = field(default_factory=list)
    general_keys: List[KeyRow] = field(default_factory=list)
    last_loaded_at: Optional[datetime] = None


def _row(index: LanguageIndex, key: str, languages_total: int) -> KeyRow:
    translations = len(index.resolve_all_languages(key))
    return KeyRow(
        key=key,
        translations=translations,
        has_missing_translations=languages_total > 0 and translations < languages_total,
    )


def build_key_overview(index: LanguageIndex, file_stem: Optional[str] = None) -> KeyOverview:
    """Coverage rows for the keys a file can reference, sorted by key."""
    languages_total = len(index.get_languages())
    keys = sorted(index.get_all_keys())

    file_keys: List[KeyRow] = []
    if file_stem:
        prefix = f"{file_stem}."
        file_keys = [_row(index, key, languages_total) for key in keys if key.startswith(prefix)]

    general_prefix = f"{GENERAL_SECTION}."
    general_keys = [
        _row(index, key, languages_total) for key in keys if key.startswith(general_prefix)
    ]

    return KeyOverview(
        file_stem=file_stem or None,
        languages_total=languages_total,
        file_keys=file_keys,
        general_keys=general_keys,
        last_loaded_at=index.last_loaded_at,
    )


def find_missing_keys(index: LanguageIndex, language: str) -> List[str]:
    """Keys defined in some language but not in ``language``, sorted."""
    present = index.get_language_table(normalize_language(language))
    return sorted(key for key in index.get_all_keys() if key not in present)
