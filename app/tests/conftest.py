"""Global fixtures shared by every test package."""

import pytest

from infrastructure.configuration import LanguageSettings


@pytest.fixture(autouse=True)
def isolated_language_env(monkeypatch):
    """Keep host environment variables out of LanguageSettings."""
    for name in ("LANGUAGE_FOLDER_PATH", "DEFAULT_LANGUAGE", "FALLBACK_LANGUAGE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def language_settings_factory():
    """Factory for LanguageSettings with explicit values."""

    def _factory(
        folder: str = "locales",
        default: str = "en",
        fallback: str = "en",
    ) -> LanguageSettings:
        return LanguageSettings(
            LANGUAGE_FOLDER_PATH=folder,
            DEFAULT_LANGUAGE=default,
            FALLBACK_LANGUAGE=fallback,
        )

    return _factory


@pytest.fixture
def language_settings(language_settings_factory):
    """Default settings: English default and fallback."""
    return language_settings_factory()
