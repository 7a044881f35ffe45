"""Infrastructure event system - in-process event dispatcher.

The event system provides a lightweight, in-process dispatcher used as the
change-notification channel of long-lived components such as the language
index.

Usage:

    from infrastructure.events import Event, EventDispatcher

    dispatcher = EventDispatcher()
    unsubscribe = dispatcher.subscribe("language_index.reloaded", handler)
    dispatcher.dispatch(Event(event_type="language_index.reloaded"))
    unsubscribe()
"""

from infrastructure.events.dispatcher import EventDispatcher, EventHandler
from infrastructure.events.models import Event

__all__ = [
    "Event",
    "EventDispatcher",
    "EventHandler",
]
