"""
DevShelf event system.

Exports the EventBus and its type definitions.
"""

from devshelf.core.event.bus import EventBus, EventMetrics
from devshelf.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)

__all__ = [
    "EventBus",
    "EventMetrics",
    "EventListener",
    "EventPayload",
    "ListenerPriority",
    "CallbackType",
]
