"""i18n system - language key indexing and resolution.

Parses YAML language files into flat per-language key tables, records where
each key is defined, and resolves short key references found in calling code.

Main components:
- flatten: strict (PyYAML) and tolerant (line-oriented) flattening parsers
- locations: key position scanner for jump-to-definition
- language_guess: language inference from file names and folders
- candidates: expansion of short keys into fully-qualified candidates
- index: LanguageIndex with atomic reload and resolution
- loader / factory: translation sources and index construction
- python_context / resolvers / overview: calling-code helpers
"""

from infrastructure.i18n.candidates import compute_candidate_keys
from infrastructure.i18n.errors import I18nError, ParseError, TranslationSourceError
from infrastructure.i18n.factory import create_language_index, load_language_folder
from infrastructure.i18n.flatten import (
    FlattenResult,
    StrictFlattener,
    TolerantFlattener,
    flatten,
    flatten_strict,
    flatten_tolerant,
    flatten_with_mode,
)
from infrastructure.i18n.index import LanguageIndex
from infrastructure.i18n.language_guess import guess_language, guess_languages
from infrastructure.i18n.loader import (
    FileTranslationSource,
    InMemoryTranslationSource,
    TranslationSource,
    discover_translation_files,
    resolve_language_folder,
)
from infrastructure.i18n.locations import locate_keys
from infrastructure.i18n.models import (
    IndexStats,
    KeyLocation,
    LanguageCode,
    LanguageGuess,
    ParseMode,
    ResolvedTranslation,
    ScopeContext,
)
from infrastructure.i18n.overview import build_key_overview, find_missing_keys
from infrastructure.i18n.python_context import (
    file_stem_from_filename,
    find_keys_in_string,
    scope_at,
    string_at,
)
from infrastructure.i18n.resolvers import (
    complete_keys,
    locate_in_context,
    locate_translation,
    resolve_in_context,
    resolve_string_references,
)

__all__ = [
    "I18nError",
    "ParseError",
    "TranslationSourceError",
    "FlattenResult",
    "StrictFlattener",
    "TolerantFlattener",
    "flatten",
    "flatten_strict",
    "flatten_tolerant",
    "flatten_with_mode",
    "locate_keys",
    "guess_language",
    "guess_languages",
    "compute_candidate_keys",
    "LanguageIndex",
    "TranslationSource",
    "FileTranslationSource",
    "InMemoryTranslationSource",
    "discover_translation_files",
    "resolve_language_folder",
    "create_language_index",
    "load_language_folder",
    "IndexStats",
    "KeyLocation",
    "LanguageCode",
    "LanguageGuess",
    "ParseMode",
    "ResolvedTranslation",
    "ScopeContext",
    "file_stem_from_filename",
    "find_keys_in_string",
    "scope_at",
    "string_at",
    "resolve_in_context",
    "resolve_string_references",
    "locate_translation",
    "locate_in_context",
    "complete_keys",
    "build_key_overview",
    "find_missing_keys",
]
