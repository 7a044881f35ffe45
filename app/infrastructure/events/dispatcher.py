"""Event dispatcher for infrastructure event system.

Provides an instance-owned handler registry. Handlers are subscribed per
event type and called synchronously, in subscription order, when events are
dispatched.
"""

from threading import Lock
from typing import Any, Callable, Dict, List

from infrastructure.events.models import Event
from infrastructure.logging import get_module_logger

logger = get_module_logger()

EventHandler = Callable[[Event], Any]


class EventDispatcher:
    """Registry of event handlers with error-contained dispatch.

    A failing handler is logged and skipped; the remaining handlers still run
    and the dispatching caller never sees the exception.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = {}
        self._lock = Lock()

    def subscribe(self, event_type: str, handler: EventHandler) -> Callable[[], None]:
        """Register a handler for an event type.

        Args:
            event_type: The type of event to handle (e.g., 'language_index.reloaded').
            handler: Callable receiving the Event.

        Returns:
            A callable that removes the handler again. Calling it twice is harmless.
        """
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
            total = len(self._handlers[event_type])

        logger.debug(
            "registered_event_handler",
            handler=getattr(handler, "__name__", "unknown"),
            event_type=event_type,
            total_handlers=total,
        )

        def unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(event_type, [])
                if handler in handlers:
                    handlers.remove(handler)

        return unsubscribe

    def dispatch(self, event: Event) -> List[Any]:
        """Dispatch event synchronously to all registered handlers.

        Args:
            event: The event to dispatch.

        Returns:
            List of return values from the handlers that succeeded.
        """
        with self._lock:
            handlers = list(self._handlers.get(event.event_type, []))

        logger.debug(
            "dispatching_event",
            event_type=event.event_type,
            handler_count=len(handlers),
            correlation_id=str(event.correlation_id),
        )

        results = []
        for handler in handlers:
            try:
                results.append(handler(event))
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "event_handler_failed",
                    handler=getattr(handler, "__name__", "unknown"),
                    event_type=event.event_type,
                    error=str(e),
                    correlation_id=str(event.correlation_id),
                )
        return results

    def get_handlers_for_event(self, event_type: str) -> List[EventHandler]:
        """Get all handlers registered for a specific event type."""
        with self._lock:
            return list(self._handlers.get(event_type, []))

    def get_registered_events(self) -> List[str]:
        """Get list of event types with at least one handler."""
        with self._lock:
            return [name for name, handlers in self._handlers.items() if handlers]

    def clear_handlers(self) -> None:
        """Remove every registered handler."""
        with self._lock:
            self._handlers.clear()
        logger.debug("cleared_all_event_handlers")
