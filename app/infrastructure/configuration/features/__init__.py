"""Feature settings __init__ - exports all feature settings."""

from infrastructure.configuration.features.language import LanguageSettings

__all__ = [
    "LanguageSettings",
]
