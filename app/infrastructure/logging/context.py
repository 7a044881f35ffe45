"""Reload context binding for structured logging.

Binds a reload identifier to every log entry made while a language index
reload is in progress, so per-file diagnostics can be correlated with the
reload that produced them.

Usage:
    from infrastructure.logging import bind_reload_context

    with bind_reload_context(source_count=len(sources)):
        logger.info("loading_sources")

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def bind_reload_context(
    reload_id: Optional[str] = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """Bind reload-scoped context to all logs within the context manager.

    Args:
        reload_id: Unique reload identifier. Auto-generated if not provided.
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        The reload identifier bound for the block.
    """
    context: dict[str, Any] = {"reload_id": reload_id or str(uuid.uuid4())}
    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield context["reload_id"]
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_reload_id() -> Optional[str]:
    """Get the reload identifier from the current logging context.

    Returns:
        The reload identifier if a reload is in progress, None otherwise.
    """
    return structlog.contextvars.get_contextvars().get("reload_id")
