"""Unit tests for infrastructure.i18n.models and infrastructure.i18n.errors."""

import pytest

from infrastructure.i18n.errors import I18nError, ParseError, TranslationSourceError
from infrastructure.i18n.models import (
    IndexStats,
    KeyLocation,
    ParseMode,
    ScopeContext,
    normalize_language,
)

pytestmark = pytest.mark.unit


class TestNormalizeLanguage:
    """Tests for language code normalization."""

    @pytest.mark.parametrize(
        "code,expected",
        [("EN", "en"), ("  de ", "de"), ("pt-BR", "pt-br"), ("", ""), (None, "")],
    )
    def test_normalize(self, code, expected):
        """Codes are trimmed and lower-cased."""
        assert normalize_language(code) == expected


class TestKeyLocation:
    """Tests for KeyLocation."""

    def test_end_column(self):
        """The end column is just past the key token."""
        location = KeyLocation(source="en.yml", line=3, column=4, key_text='"hello"')

        assert location.end_column == 11

    def test_is_immutable(self):
        """Locations cannot be modified after creation."""
        location = KeyLocation(source="en.yml", line=0, column=0, key_text="a")

        with pytest.raises(AttributeError):
            location.line = 1


class TestIndexStats:
    """Tests for IndexStats."""

    def test_defaults_are_zero(self):
        """A fresh stats object counts nothing."""
        assert all(value == 0 for value in IndexStats().to_dict().values())

    def test_to_dict(self):
        """Counters serialize by field name."""
        stats = IndexStats(file_count=2, language_count=1, strict_parse_count=2)

        data = stats.to_dict()

        assert data["file_count"] == 2
        assert data["language_count"] == 1
        assert data["strict_parse_count"] == 2
        assert set(data) == {
            "file_count",
            "language_count",
            "unique_key_count",
            "total_entry_count",
            "strict_parse_count",
            "tolerant_parse_count",
            "failed_parse_count",
        }


class TestParseMode:
    """Tests for ParseMode."""

    def test_values(self):
        """Modes compare equal to their string values."""
        assert ParseMode.STRICT == "strict"
        assert ParseMode("tolerant") is ParseMode.TOLERANT
        assert ParseMode.FAILED.value == "failed"


class TestScopeContext:
    """Tests for ScopeContext."""

    def test_all_parts_optional(self):
        """An empty scope has no parts."""
        scope = ScopeContext()

        assert (scope.file_stem, scope.class_name, scope.function_name) == (None, None, None)


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_parse_error_position(self):
        """Parse errors carry the reported position."""
        error = ParseError("bad", source="en.yml", line=2, column=5)

        assert isinstance(error, I18nError)
        assert str(error) == "bad"
        assert (error.source, error.line, error.column) == ("en.yml", 2, 5)

    def test_parse_error_without_position(self):
        """Position attributes default to None."""
        error = ParseError("bad")

        assert error.source is None
        assert error.line is None

    def test_translation_source_error(self):
        """Source errors name the unreadable source."""
        error = TranslationSourceError("unreadable", source="de.yml")

        assert isinstance(error, I18nError)
        assert error.source == "de.yml"
