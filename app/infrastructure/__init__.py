"""Infrastructure modules for the language key index.

Centralized infrastructure components:
- configuration: Settings management (settings, LanguageSettings)
- logging: Structured logging (get_module_logger, configure_logging)
- events: In-process event model and dispatcher
- i18n: Language key parsing, indexing and resolution
"""

from infrastructure.configuration import settings

__all__ = ["settings"]
