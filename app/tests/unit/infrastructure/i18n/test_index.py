"""Unit tests for infrastructure.i18n.index.LanguageIndex.

Tests cover:
- reload statistics and per-file failure containment
- resolution through the default -> fallback -> any chain
- key locations and key sets
- snapshot publication and change notification
- dispose lifecycle
"""

from datetime import datetime

import pytest

from infrastructure.i18n import (
    FileTranslationSource,
    IndexStats,
    InMemoryTranslationSource,
    LanguageIndex,
    ParseMode,
    ResolvedTranslation,
)

pytestmark = pytest.mark.unit

LANGUAGES = ["en", "de", "fr", "es", "it", "nl", "pt", "pl", "sv", "da"]


class TestReload:
    """Tests for building the index."""

    def test_stats_after_reload(self, loaded_index):
        """Counters describe the published snapshot."""
        assert loaded_index.get_detailed_stats() == IndexStats(
            file_count=2,
            language_count=2,
            unique_key_count=5,
            total_entry_count=7,
            strict_parse_count=2,
            tolerant_parse_count=0,
            failed_parse_count=0,
        )

    def test_reload_returns_stats(self, sample_sources, language_settings):
        """reload returns the counters it published."""
        index = LanguageIndex()

        stats = index.reload(sample_sources, language_settings)

        assert stats is index.get_detailed_stats()

    def test_one_unreadable_file_among_ten(self, tmp_path, source_factory, language_settings):
        """An unreadable file is counted as failed and the rest still load."""
        sources = [
            source_factory(f"locales/{code}.yml", f"greeting: hello {code}\n")
            for code in LANGUAGES[:9]
        ]
        sources.append(FileTranslationSource(tmp_path / "locales" / "da.yml"))
        index = LanguageIndex()

        stats = index.reload(sources, language_settings)

        assert stats.file_count == 10
        assert stats.failed_parse_count == 1
        assert stats.strict_parse_count == 9
        assert stats.language_count == 9
        assert index.resolve_all_languages("greeting") == {
            code: f"hello {code}" for code in LANGUAGES[:9]
        }
        assert index.get_parse_modes()[str(tmp_path / "locales" / "da.yml")] is ParseMode.FAILED

    def test_unexpected_source_error_is_contained(self, source_factory, language_settings):
        """Any exception from a single source is contained to that source."""

        class BrokenSource:
            identifier = "locales/de.yml"

            def read_bytes(self):
                raise RuntimeError("boom")

        index = LanguageIndex()

        stats = index.reload([source_factory("locales/en.yml", "a: b\n"), BrokenSource()], language_settings)

        assert stats.failed_parse_count == 1
        assert index.get_language_table("en") == {"a": "b"}

    def test_recursive_alias_falls_back_to_tolerant(self, source_factory, language_settings):
        """A self-referencing alias does not drop the rest of the file."""
        index = LanguageIndex()
        text = "greeting: Hi\nbase: &b\n  self: *b\n"

        stats = index.reload([source_factory("locales/en.yml", text)], language_settings)

        assert stats.tolerant_parse_count == 1
        assert stats.failed_parse_count == 0
        assert index.resolve("greeting", language_settings).value == "Hi"
        assert index.get_key_location("en", "greeting").line == 0
        assert index.get_key_location("en", "base.self").line == 2

    def test_locations_survive_flatten_failure(self, source_factory, language_settings, monkeypatch):
        """Key locations are kept even when flattening a file fails outright."""
        from infrastructure.i18n import index as index_module

        def fail(text, source=None):
            raise RuntimeError("boom")

        monkeypatch.setattr(index_module, "flatten_with_mode", fail)
        index = LanguageIndex()

        stats = index.reload([source_factory("locales/en.yml", "greeting: Hi\n")], language_settings)

        assert stats.failed_parse_count == 1
        assert index.get_language_table("en") == {}
        assert index.get_key_location("en", "greeting").column == 0

    def test_tolerant_parse_counted(self, source_factory, broken_messages, language_settings):
        """Files rejected by PyYAML are loaded with the tolerant parser."""
        index = LanguageIndex()

        stats = index.reload([source_factory("locales/en.yml", broken_messages)], language_settings)

        assert stats.tolerant_parse_count == 1
        assert index.resolve("bot.bye", language_settings).value == "Bye"
        assert index.get_parse_modes() == {"locales/en.yml": ParseMode.TOLERANT}

    def test_empty_tolerant_result_counted_as_failed(self, source_factory, language_settings):
        """A fallback parse that yields nothing is a failure."""
        index = LanguageIndex()

        stats = index.reload([source_factory("locales/en.yml", "- a\n- b\n")], language_settings)

        assert stats.failed_parse_count == 1
        assert stats.total_entry_count == 0

    def test_files_of_one_language_are_merged(self, source_factory, language_settings):
        """Several files guessed as one language share a table."""
        sources = [
            source_factory("locales/en/commands.yml", "commands:\n  ban: Ban\n"),
            source_factory("locales/en/errors.yml", "errors:\n  oops: Oops\n"),
        ]
        index = LanguageIndex()

        index.reload(sources, language_settings)

        assert index.get_languages() == ["en"]
        assert index.get_language_table("en") == {"commands.ban": "Ban", "errors.oops": "Oops"}

    def test_untagged_files_go_to_default_language(self, source_factory, language_settings_factory):
        """Files without a language marker belong to the default language."""
        settings = language_settings_factory(default="de")
        index = LanguageIndex()

        index.reload([source_factory("translations/messages.yml", "a: b\n")], settings)

        assert index.get_languages() == ["de"]

    def test_reload_replaces_previous_state(self, loaded_index, source_factory, language_settings):
        """A reload publishes only what the new sources contain."""
        loaded_index.reload([source_factory("locales/de.yml", "only: Nur\n")], language_settings)

        assert loaded_index.get_languages() == ["de"]
        assert loaded_index.get_all_keys() == {"only"}
        assert loaded_index.resolve("bot.hello", language_settings) is None

    def test_reload_without_sources(self, loaded_index, language_settings):
        """Reloading with no files empties the index."""
        stats = loaded_index.reload([], language_settings)

        assert stats == IndexStats()
        assert loaded_index.get_all_keys() == set()

    def test_readers_see_previous_snapshot_during_reload(self, loaded_index, language_settings):
        """Queries made while a reload is running see the old snapshot."""
        seen = []

        class ObservingSource:
            identifier = "locales/en.yml"

            def read_bytes(self):
                seen.append(loaded_index.resolve("bot.hello", language_settings))
                return b"bot:\n  hello: Hi\n"

        loaded_index.reload([ObservingSource()], language_settings)

        assert seen[0].value == "Hello"
        assert loaded_index.resolve("bot.hello", language_settings).value == "Hi"

    def test_last_loaded_at(self, sample_sources, language_settings):
        """The publish time is recorded."""
        index = LanguageIndex()
        assert index.last_loaded_at is None

        index.reload(sample_sources, language_settings)

        assert isinstance(index.last_loaded_at, datetime)


class TestResolve:
    """Tests for the resolution chain."""

    def test_default_language_hit(self, loaded_index, language_settings):
        """A key in the default language resolves from it."""
        assert loaded_index.resolve("bot.hello", language_settings) == ResolvedTranslation(
            key="bot.hello", value="Hello", language="en", from_default=True
        )

    def test_default_wins_over_other_languages(self, loaded_index, language_settings_factory):
        """The default language is used even when others have the key."""
        settings = language_settings_factory(default="de", fallback="en")

        resolved = loaded_index.resolve("bot.hello", settings)

        assert resolved.value == "Hallo"
        assert resolved.from_default is True

    def test_fallback_language_hit(self, loaded_index, language_settings_factory):
        """A key missing from the default resolves from the fallback."""
        settings = language_settings_factory(default="de", fallback="en")

        resolved = loaded_index.resolve("general.confirm", settings)

        assert resolved == ResolvedTranslation("general.confirm", "Yes", "en", False)

    def test_any_language_hit(self, loaded_index, language_settings_factory):
        """Without default or fallback hits, languages are scanned in stored order."""
        settings = language_settings_factory(default="fr", fallback="es")

        resolved = loaded_index.resolve("general.cancel", settings)

        assert resolved.language == "en"
        assert resolved.from_default is False

    def test_missing_key(self, loaded_index, language_settings):
        """A key no language has resolves to None."""
        assert loaded_index.resolve("missing", language_settings) is None

    def test_resolve_on_empty_index(self, language_settings):
        """An index that was never loaded resolves nothing."""
        assert LanguageIndex().resolve("bot.hello", language_settings) is None

    def test_resolve_all_languages(self, loaded_index):
        """Every language with the key is reported."""
        assert loaded_index.resolve_all_languages("bot.hello") == {"en": "Hello", "de": "Hallo"}
        assert loaded_index.resolve_all_languages("missing") == {}


class TestQueries:
    """Tests for locations, keys and languages."""

    def test_get_key_location(self, loaded_index):
        """Locations are kept per language."""
        location = loaded_index.get_key_location("en", "bot.hello")

        assert (location.source, location.line, location.column) == ("locales/en.yml", 4, 2)
        assert location.key_text == "hello"

    def test_get_key_location_is_case_insensitive(self, loaded_index):
        """Language codes are matched case-insensitively."""
        assert loaded_index.get_key_location("DE", "bot.hello").source == "locales/de.yml"

    def test_get_key_location_unknown(self, loaded_index):
        """Unknown languages and keys give None."""
        assert loaded_index.get_key_location("fr", "bot.hello") is None
        assert loaded_index.get_key_location("en", "missing") is None

    def test_get_any_key_location(self, loaded_index):
        """The first language in stored order that has the key wins."""
        assert loaded_index.get_any_key_location("general.cancel").source == "locales/en.yml"
        assert loaded_index.get_any_key_location("missing") is None

    def test_get_all_keys(self, loaded_index):
        """All keys of all languages are returned as one set."""
        assert loaded_index.get_all_keys() == {
            "general.confirm",
            "general.cancel",
            "bot.hello",
            "bot.general.bye",
            "bot.Greeter.greet.welcome",
        }

    def test_get_languages_in_stored_order(self, loaded_index):
        """Languages are listed in the order they were first loaded."""
        assert loaded_index.get_languages() == ["en", "de"]

    def test_get_language_table_is_a_copy(self, loaded_index):
        """Mutating a returned table does not change the index."""
        table = loaded_index.get_language_table("de")
        table["bot.hello"] = "changed"

        assert loaded_index.get_language_table("de")["bot.hello"] == "Hallo"


class TestChangeNotification:
    """Tests for observers and lifecycle."""

    def test_observer_notified_with_stats(self, sample_sources, language_settings, mock_observer):
        """Observers receive an event carrying the new stats."""
        index = LanguageIndex()
        index.on_did_update(mock_observer)

        stats = index.reload(sample_sources, language_settings)

        mock_observer.assert_called_once()
        event = mock_observer.call_args.args[0]
        assert event.event_type == LanguageIndex.RELOADED_EVENT
        assert event.metadata == stats.to_dict()

    def test_observer_sees_published_snapshot(self, sample_sources, language_settings):
        """By the time observers run, the new snapshot is visible."""
        index = LanguageIndex()
        seen = []
        index.on_did_update(lambda event: seen.append(index.get_languages()))

        index.reload(sample_sources, language_settings)

        assert seen == [["en", "de"]]

    def test_unsubscribe(self, sample_sources, language_settings, mock_observer):
        """Unsubscribed observers are not called."""
        index = LanguageIndex()
        unsubscribe = index.on_did_update(mock_observer)

        unsubscribe()
        index.reload(sample_sources, language_settings)

        mock_observer.assert_not_called()

    def test_dispose_during_reload_discards_snapshot(
        self, source_factory, language_settings, mock_observer
    ):
        """A reload that is overtaken by dispose publishes nothing."""
        index = LanguageIndex()
        index.on_did_update(mock_observer)

        class DisposingSource:
            identifier = "locales/de.yml"

            def read_bytes(self):
                index.dispose()
                return b"greeting: Hallo\n"

        stats = index.reload(
            [source_factory("locales/en.yml", "greeting: Hi\n"), DisposingSource()],
            language_settings,
        )

        assert index.disposed is True
        assert stats == IndexStats()
        assert index.get_all_keys() == set()
        assert index.get_languages() == []
        assert index.last_loaded_at is None
        mock_observer.assert_not_called()

    def test_failing_observer_does_not_break_reload(
        self, sample_sources, language_settings, mock_observer
    ):
        """An observer that raises affects neither the reload nor other observers."""
        index = LanguageIndex()
        index.on_did_update(lambda event: 1 / 0)
        index.on_did_update(mock_observer)

        stats = index.reload(sample_sources, language_settings)

        assert stats.language_count == 2
        mock_observer.assert_called_once()

    def test_dispose(self, loaded_index, sample_sources, language_settings, mock_observer):
        """A disposed index is empty, ignores reloads and notifies nobody."""
        loaded_index.on_did_update(mock_observer)

        loaded_index.dispose()
        stats = loaded_index.reload(sample_sources, language_settings)

        assert loaded_index.disposed is True
        assert stats == IndexStats()
        assert loaded_index.get_all_keys() == set()
        assert loaded_index.last_loaded_at is None
        mock_observer.assert_not_called()

    def test_in_memory_source_identifier_used_for_parse_modes(self, language_settings):
        """Parse modes are keyed by source identifier."""
        index = LanguageIndex()
        index.reload([InMemoryTranslationSource("locales/en.yml", b"a: b\n")], language_settings)

        assert index.get_parse_modes() == {"locales/en.yml": ParseMode.STRICT}
