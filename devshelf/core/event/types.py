"""
Core Event Types for the DevShelf EventBus.

Purpose
-------
Type definitions for the event system: event payloads, listener priorities,
callback types, and the listener record.

Priority Levels
---------------
- CRITICAL (0): runs first. Use for state that other listeners read.
- HIGH (10): important side effects (badges, counters).
- NORMAL (50): notifications.
- LOW (100): logging and analytics.

Listeners always run sequentially in priority order; the numeric values are
used only for sorting.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

# Simple dict structure that should be JSON-serializable for best observability
EventPayload = dict[str, Any]


class ListenerPriority(Enum):
    """
    Priority levels for event listeners (lower = earlier).

    Examples
    --------
    >>> ListenerPriority.CRITICAL.value
    0
    """

    CRITICAL = 0
    HIGH = 10
    NORMAL = 50
    LOW = 100


# Supports both sync and async callables taking a single EventPayload parameter
CallbackType = Union[
    Callable[[EventPayload], Any],
    Callable[[EventPayload], Awaitable[Any]],
]

_sequence = itertools.count()


@dataclass(slots=True, frozen=True)
class EventListener:
    """
    A registered event listener.

    Attributes
    ----------
    callback:
        Async or sync callable invoked with the event payload.
    priority:
        ListenerPriority determining execution order.
    identifier:
        Unique string identifier for deduplication and unsubscription.
    order:
        Registration sequence number; ties within a priority run in
        registration order.
    """

    callback: CallbackType
    priority: ListenerPriority
    identifier: str
    order: int

    @classmethod
    def from_callback(
        cls,
        event_name: str,
        callback: CallbackType,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
    ) -> "EventListener":
        """
        Create a listener, generating an identifier when none is given.

        Examples
        --------
        >>> listener = EventListener.from_callback("progress.leveled_up", print)
        >>> listener.identifier
        'builtins.print@progress.leveled_up'
        """
        if identifier is None:
            module = getattr(callback, "__module__", None) or "unknown"
            name = getattr(callback, "__qualname__", None) or getattr(
                callback, "__name__", repr(callback)
            )
            identifier = f"{module}.{name}@{event_name}"

        return cls(
            callback=callback,
            priority=priority,
            identifier=identifier,
            order=next(_sequence),
        )

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.priority.value, self.order)
