"""Infrastructure configuration module - public API.

This module provides centralized configuration management using Pydantic
BaseSettings with domain-based organization.

Exports:
    settings: Singleton Settings instance (main configuration object)
    Settings: Main settings class (for testing/overrides)
    LanguageSettings: Language index settings class

Example:
    ```python
    from infrastructure.configuration import settings

    folder = settings.language.LANGUAGE_FOLDER_PATH
    fallback = settings.language.fallback_language
    ```
"""

from infrastructure.configuration.features.language import LanguageSettings
from infrastructure.configuration.settings import Settings, settings

__all__ = ["Settings", "LanguageSettings", "settings"]
