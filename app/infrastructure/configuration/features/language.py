"""Language index feature settings."""

import re
from typing import Any

from pydantic import field_validator
from pydantic_settings import SettingsConfigDict

from infrastructure.configuration.base import FeatureSettings

_QUOTED = re.compile(r"^(['\"])(.*)\1$", re.DOTALL)


def normalize_setting_string(value: Any) -> str:
    """Trim a raw setting value and strip one pair of matching quotes."""
    if value is None:
        return ""
    text = str(value).strip()
    match = _QUOTED.match(text)
    if match:
        text = match.group(2)
    return text.strip()


class LanguageSettings(FeatureSettings):
    """Configuration for the language key index.

    Settings are frozen: a reload cycle always sees one consistent triple of
    root folder, default language and fallback language.

    Environment Variables:
        LANGUAGE_FOLDER_PATH: Folder holding the YAML language files, absolute or
            relative to a workspace root (default: bot/lang)
        DEFAULT_LANGUAGE: Language consulted first when resolving keys (default: en)
        FALLBACK_LANGUAGE: Language consulted second when resolving keys (default: en)

    Example:
        ```python
        from infrastructure.configuration import settings

        index.resolve("commands.ban.general.success", settings.language)
        ```
    """

    LANGUAGE_FOLDER_PATH: str = "bot/lang"
    DEFAULT_LANGUAGE: str = "en"
    FALLBACK_LANGUAGE: str = "en"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("LANGUAGE_FOLDER_PATH", mode="before")
    @classmethod
    def _normalize_folder_path(cls, v: Any) -> str:
        """Strip quotes and use forward slashes."""
        return normalize_setting_string(v).replace("\\", "/")

    @field_validator("DEFAULT_LANGUAGE", "FALLBACK_LANGUAGE", mode="before")
    @classmethod
    def _normalize_language(cls, v: Any) -> str:
        """Language codes are matched case-insensitively and stored lower-case."""
        return normalize_setting_string(v).lower()

    @property
    def root_folder(self) -> str:
        return self.LANGUAGE_FOLDER_PATH

    @property
    def default_language(self) -> str:
        return self.DEFAULT_LANGUAGE

    @property
    def fallback_language(self) -> str:
        return self.FALLBACK_LANGUAGE
