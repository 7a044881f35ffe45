"""Structured logging infrastructure.

This package provides centralized logging configuration and utilities
using structlog.

Public API:
    - configure_logging(): Host start-up entry point for logging
    - build_processors(): The structlog processor chain outside of tests
    - get_logger(): Get a logger instance with a specific name
    - get_module_logger(): Get a logger for the calling module
    - bind_reload_context(): Context manager for reload-scoped logging
    - get_reload_id(): Get the current reload identifier from context

Formatters:
    - add_app_info(): Processor to add app name/version
    - truncate_large_values(): Processor to limit string lengths

Example:
    from infrastructure.logging import configure_logging, get_module_logger

    configure_logging()

    logger = get_module_logger()
    logger.info("module_initialized")
"""

from infrastructure.logging.setup import (
    build_processors,
    configure_logging,
    get_logger,
    get_module_logger,
)
from infrastructure.logging.context import bind_reload_context, get_reload_id
from infrastructure.logging.formatters import add_app_info, truncate_large_values

__all__ = [
    "build_processors",
    "configure_logging",
    "get_logger",
    "get_module_logger",
    "bind_reload_context",
    "get_reload_id",
    "add_app_info",
    "truncate_large_values",
]
