"""
DevShelf EventBus: async publish/subscribe with wildcard routing.

Purpose
-------
Decouples the progress service from whatever reacts to progress changes
(notifications, analytics). The service publishes `progress.*` events after a
successful save; listeners subscribe by exact name or by wildcard pattern.

Responsibilities
----------------
- Register/unregister event listeners with priorities
- Publish events to all matching listeners (exact + wildcard)
- Execute listeners sequentially in priority order
- Error isolation (one failing listener never blocks others)
- Publish counters for introspection

Design Decisions
----------------
- **Instance-based**: each service/test owns its bus
- **fnmatch patterns**: "progress.*", "*" and friends
- **Sequential execution**: notification order follows publish order, which
  keeps multi-achievement announcements in catalog order
"""

from __future__ import annotations

import inspect
from collections import defaultdict
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Dict, List, Optional

from devshelf.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)
from devshelf.core.exceptions import EventBusError
from devshelf.core.logging.logger import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class EventMetrics:
    events_published: int = 0
    listeners_invoked: int = 0
    listener_errors: int = 0


class EventBus:
    """
    Async event bus.

    Examples
    --------
    >>> bus = EventBus()
    >>> bus.subscribe("progress.leveled_up", on_level_up)
    >>> bus.subscribe("progress.*", audit, priority=ListenerPriority.LOW)
    >>> await bus.publish("progress.leveled_up", {"user_id": "u1", "new_level": 3})
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[EventListener]] = defaultdict(list)
        self._metrics = EventMetrics()

    # ------------------------------------------------------------------ #
    # Subscription API
    # ------------------------------------------------------------------ #

    def subscribe(
        self,
        event_name: str,
        callback: CallbackType,
        *,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
    ) -> str:
        """
        Subscribe a callback to an event name or pattern.

        Returns the listener identifier. Subscribing the same identifier to
        the same event twice is a no-op.

        Raises
        ------
        EventBusError:
            If the event name is empty or the callback is not callable.
        """
        if not event_name:
            raise EventBusError(str(event_name), "Event name must be a non-empty string")
        if not callable(callback):
            raise EventBusError(event_name, f"Listener for '{event_name}' is not callable")

        listener = EventListener.from_callback(
            event_name=event_name,
            callback=callback,
            priority=priority,
            identifier=identifier,
        )

        existing = self._listeners[event_name]
        if any(entry.identifier == listener.identifier for entry in existing):
            logger.warning(
                "EventBus: duplicate listener prevented",
                extra={"event_name": event_name, "listener_id": listener.identifier},
            )
            return listener.identifier

        existing.append(listener)
        logger.debug(
            "EventBus: subscribed listener",
            extra={
                "event_name": event_name,
                "listener_id": listener.identifier,
                "priority": listener.priority.name,
            },
        )
        return listener.identifier

    def unsubscribe(self, event_name: str, identifier: str) -> bool:
        """Remove a listener; returns True if one was removed."""
        existing = self._listeners.get(event_name, [])
        remaining = [entry for entry in existing if entry.identifier != identifier]
        removed = len(remaining) != len(existing)
        if remaining:
            self._listeners[event_name] = remaining
        else:
            self._listeners.pop(event_name, None)
        return removed

    def listener_count(self, event_name: Optional[str] = None) -> int:
        if event_name is None:
            return sum(len(entries) for entries in self._listeners.values())
        return len(self._listeners.get(event_name, []))

    # ------------------------------------------------------------------ #
    # Publishing
    # ------------------------------------------------------------------ #

    def _matching_listeners(self, event_name: str) -> List[EventListener]:
        matched: List[EventListener] = []
        for pattern, entries in self._listeners.items():
            if pattern == event_name or fnmatchcase(event_name, pattern):
                matched.extend(entries)
        return sorted(matched, key=lambda entry: entry.sort_key)

    async def publish(self, event_name: str, payload: EventPayload) -> int:
        """
        Publish an event to every matching listener.

        Listeners run one at a time in priority order. A listener that raises
        is logged and skipped.

        Returns
        -------
        int:
            Number of listeners that completed without error.
        """
        self._metrics.events_published += 1
        listeners = self._matching_listeners(event_name)
        succeeded = 0

        for listener in listeners:
            self._metrics.listeners_invoked += 1
            try:
                result = listener.callback({**payload, "event_name": event_name})
                if inspect.isawaitable(result):
                    await result
                succeeded += 1
            except Exception:
                self._metrics.listener_errors += 1
                logger.exception(
                    "EventBus: listener failed",
                    extra={
                        "event_name": event_name,
                        "listener_id": listener.identifier,
                    },
                )

        return succeeded

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def get_metrics(self) -> EventMetrics:
        return EventMetrics(
            events_published=self._metrics.events_published,
            listeners_invoked=self._metrics.listeners_invoked,
            listener_errors=self._metrics.listener_errors,
        )

    def clear(self) -> None:
        self._listeners.clear()
