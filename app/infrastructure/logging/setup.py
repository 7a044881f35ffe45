"""Structlog configuration for the language index.

Importing this module applies a default configuration derived from the
environment (``LOG_LEVEL``, ``PREFIX``), so every i18n module can create
its logger at import time. A host that embeds the index (an editor plugin,
a bot, a CLI) calls ``configure_logging`` once at start-up, before the first
log call, to apply its own settings; structlog caches each logger on first use.

Usage:
    from infrastructure.logging import configure_logging, get_module_logger

    # Host start-up
    configure_logging(log_level="DEBUG")

    # In a module
    logger = get_module_logger()
    logger.info("language_index_reloaded", file_count=3)
"""

import inspect
import logging
import sys
from typing import Any, Callable, List, Optional, Sequence

import structlog
from structlog.stdlib import BoundLogger

from infrastructure.configuration import Settings
from infrastructure.configuration import settings as app_settings
from infrastructure.logging.formatters import add_app_info, truncate_large_values

APP_NAME = "langkey-index"

# Block scalars and joined sequences can make single values very long
MAX_VALUE_LENGTH = 500

Processor = Callable[..., Any]


def _is_test_environment() -> bool:
    """Detect if running in a test environment.

    Returns:
        True if pytest is in sys.modules, False otherwise
    """
    return "pytest" in sys.modules


def build_processors(
    is_production: bool,
    extra_processors: Optional[Sequence[Processor]] = None,
) -> List[Processor]:
    """Processor chain used outside of tests.

    Reload identifiers bound with ``bind_reload_context`` are merged first;
    ``extra_processors`` run just before the renderer, which is JSON in
    production and the console renderer otherwise.
    """
    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        add_app_info(APP_NAME),
        truncate_large_values(max_length=MAX_VALUE_LENGTH),
    ]
    processors.extend(extra_processors or [])

    if is_production:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def _configure_silent() -> BoundLogger:
    # Nothing is emitted: the root logger level sits above CRITICAL
    logging.root.setLevel(logging.CRITICAL + 1)
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", level=logging.CRITICAL + 1, force=True)
    return structlog.stdlib.get_logger()


def configure_logging(
    log_level: Optional[str] = None,
    is_production: Optional[bool] = None,
    settings: Optional[Settings] = None,
    extra_processors: Optional[Sequence[Processor]] = None,
) -> BoundLogger:
    """Configure structured logging; the host's start-up entry point.

    Safe to call more than once. Under pytest all output is suppressed.

    Args:
        log_level: Level name (DEBUG, INFO, ...). Defaults to ``settings.LOG_LEVEL``.
        is_production: JSON output when True. Defaults to ``settings.is_production``.
        settings: Settings to read defaults from (default: the module singleton).
        extra_processors: Host processors inserted before the renderer.

    Returns:
        Configured logger instance
    """
    if _is_test_environment():
        return _configure_silent()

    settings = settings or app_settings
    prod_mode = is_production if is_production is not None else settings.is_production

    structlog.configure(
        processors=build_processors(prod_mode, extra_processors),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    effective_log_level = log_level or settings.LOG_LEVEL
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, effective_log_level.upper(), logging.INFO),
        force=True,
    )

    return structlog.stdlib.get_logger()


# Defaults from the environment until the host configures logging itself
logger: BoundLogger = configure_logging()


def get_logger(name: Optional[str] = None) -> BoundLogger:
    """Logger bound to ``name``, or to the calling module's name."""
    if name:
        return logger.bind(logger_name=name)

    module = _calling_module()
    return logger.bind(logger_name=module.__name__ if module else "unknown")


def get_module_logger() -> BoundLogger:
    """Logger for the calling module with ``component`` and ``module_path`` bound.

    Example:
        # In infrastructure/i18n/index.py
        logger = get_module_logger()
        # context: {"component": "index", "module_path": "infrastructure.i18n.index"}
    """
    module = _calling_module()
    if module is None:
        return logger.bind(component="unknown")

    module_name = module.__name__
    return logger.bind(component=module_name.split(".")[-1], module_path=module_name)


def _calling_module():
    # Two frames up: the caller of get_logger/get_module_logger
    frame = inspect.currentframe()
    for _ in range(2):
        if frame is None:
            return None
        frame = frame.f_back
    if frame is None:
        return None
    return inspect.getmodule(frame)
