"""Feature-level fixtures for i18n system tests.

Provides sample language files and loaded indexes for parsing, indexing and
resolution scenarios.
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from infrastructure.i18n import InMemoryTranslationSource, LanguageIndex

EN_MESSAGES = """\
general:
  confirm: "Yes"
  cancel: Cancel
bot:
  hello: Hello
  general:
    bye: Goodbye
  Greeter:
    greet:
      welcome: Welcome aboard
"""

DE_MESSAGES = """\
general:
  cancel: Abbrechen
bot:
  hello: Hallo
"""

BROKEN_MESSAGES = """\
bot:
  hello: Hello
  bad: value: with colon
  bye: Bye
"""


@pytest.fixture
def source_factory():
    """Factory for in-memory translation sources."""

    def _factory(identifier: str, content: str) -> InMemoryTranslationSource:
        return InMemoryTranslationSource(identifier, content.encode("utf-8"))

    return _factory


@pytest.fixture
def sample_sources(source_factory):
    """English and German files tagged by file name."""
    return [
        source_factory("locales/en.yml", EN_MESSAGES),
        source_factory("locales/de.yml", DE_MESSAGES),
    ]


@pytest.fixture
def loaded_index(sample_sources, language_settings):
    """Index reloaded from the sample sources."""
    index = LanguageIndex()
    index.reload(sample_sources, language_settings)
    return index


@pytest.fixture
def translations_dir(tmp_path) -> Path:
    """Temporary language folder on disk.

    Returns a directory structure like:
    - locales/en.yml
    - locales/de.yml
    - locales/fr/messages.yaml
    """
    folder = tmp_path / "locales"
    (folder / "fr").mkdir(parents=True)
    (folder / "en.yml").write_text(EN_MESSAGES, encoding="utf-8")
    (folder / "de.yml").write_text(DE_MESSAGES, encoding="utf-8")
    (folder / "fr" / "messages.yaml").write_text("bot:\n  hello: Bonjour\n", encoding="utf-8")
    (folder / "notes.txt").write_text("not a language file", encoding="utf-8")
    return folder


@pytest.fixture
def mock_observer():
    """Mock observer for index change notifications."""
    return MagicMock()


@pytest.fixture
def en_messages():
    """English sample document (valid YAML)."""
    return EN_MESSAGES


@pytest.fixture
def de_messages():
    """German sample document (valid YAML)."""
    return DE_MESSAGES


@pytest.fixture
def broken_messages():
    """Document PyYAML rejects but the tolerant parser can read."""
    return BROKEN_MESSAGES
