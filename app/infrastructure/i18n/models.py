"""Core data structures for the language key index.

Defines the value types shared by the parsers, the index and its callers.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

LanguageCode = str
"""Short case-insensitive language identifier, stored lower-case (e.g. "en")."""

DEFAULT_LANGUAGE_CODE: LanguageCode = "en"
"""Language assumed for untagged files when no default language is configured."""


def normalize_language(code: Optional[str]) -> LanguageCode:
    """Return the canonical (trimmed, lower-case) form of a language code."""
    return (code or "").strip().lower()


class ParseMode(str, Enum):
    """Which flattening strategy produced a file's table."""

    STRICT = "strict"
    TOLERANT = "tolerant"
    FAILED = "failed"


@dataclass(frozen=True)
class KeyLocation:
    """Source position of a key token, used for jump-to-definition.

    Attributes:
        source: Identifier of the file that defines the key.
        line: 0-based line of the key token.
        column: 0-based column where the key token begins.
        key_text: The key token exactly as written (quotes included), which is
            usually only the last segment of the dotted path.
    """

    source: str
    line: int
    column: int
    key_text: str

    @property
    def end_column(self) -> int:
        """Column just past the key token, for selecting it in an editor."""
        return self.column + len(self.key_text)


@dataclass(frozen=True)
class ResolvedTranslation:
    """Result of resolving a key against the index.

    Attributes:
        key: The fully-qualified key that was looked up.
        value: The translated string.
        language: Language the value came from.
        from_default: True only when the value came from the default language.
    """

    key: str
    value: str
    language: LanguageCode
    from_default: bool


@dataclass(frozen=True)
class ScopeContext:
    """Where in the calling source a short key reference was found.

    All parts are optional. Empty strings are treated like None.
    """

    file_stem: Optional[str] = None
    class_name: Optional[str] = None
    function_name: Optional[str] = None


@dataclass(frozen=True)
class LanguageGuess:
    """Language inferred for one file.

    Attributes:
        language: Lower-case language code.
        tagged: True when the filename or folder encodes the language, False
            when the configured default was assumed.
    """

    language: LanguageCode
    tagged: bool


@dataclass(frozen=True)
class IndexStats:
    """Aggregate counters of the last published index snapshot."""

    file_count: int = 0
    language_count: int = 0
    unique_key_count: int = 0
    total_entry_count: int = 0
    strict_parse_count: int = 0
    tolerant_parse_count: int = 0
    failed_parse_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
