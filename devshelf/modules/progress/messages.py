"""
Progress notification messages for DevShelf.

Purpose
-------
Single source of truth for the user-facing texts of progress events: level
ups, achievement unlocks and streak milestones. Turns published
`progress.*` events into NotificationMessage records and hands them to a
NotificationSink.

Design Notes
------------
Each template contains:
- kind: notification category stored with the message
- title: short heading
- template: message body with {placeholder} interpolation
- toast: one-line celebration text for transient UI popups

Events without a template (xp_gained, streak_extended, streak_broken)
produce no notification.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from devshelf.core.event.bus import EventBus
from devshelf.core.event.types import ListenerPriority
from devshelf.core.logging.logger import get_logger
from devshelf.domain.models.base import DomainEvent
from devshelf.modules.progress.aggregator import (
    EVENT_ACHIEVEMENT_UNLOCKED,
    EVENT_LEVELED_UP,
    EVENT_STREAK_MILESTONE,
)
from devshelf.modules.progress.ports import NotificationSink

logger = get_logger(__name__)


class NotificationKind(str, Enum):
    """Notification categories understood by the inbox."""

    ACHIEVEMENT = "achievement"
    LEARNING_MILESTONE = "learning_milestone"
    STREAK_REMINDER = "streak_reminder"


@dataclass(frozen=True)
class NotificationMessage:
    """A rendered notification for one user."""

    user_id: str
    kind: NotificationKind
    title: str
    message: str
    toast: str = ""
    achievement_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "type": self.kind.value,
            "title": self.title,
            "message": self.message,
            "toast": self.toast,
            "achievement_id": self.achievement_id,
        }


class NotificationTemplate:
    """Template for rendering one event type."""

    def __init__(
        self,
        kind: NotificationKind,
        title: str,
        template: Union[str, Callable[[Mapping[str, Any]], str]],
        toast: Union[str, Callable[[Mapping[str, Any]], str]] = "",
    ):
        self.kind = kind
        self.title = title
        self.template = template
        self.toast = toast

    @staticmethod
    def _render(text: Union[str, Callable[[Mapping[str, Any]], str]], payload: Mapping[str, Any]) -> str:
        if callable(text):
            return text(payload)
        return text.format(**payload)

    def format(self, payload: Mapping[str, Any]) -> NotificationMessage:
        """
        Render the template with an event payload.

        Raises:
            KeyError: If the payload lacks a placeholder field
        """
        return NotificationMessage(
            user_id=str(payload.get("user_id", "")),
            kind=self.kind,
            title=self.title,
            message=self._render(self.template, payload),
            toast=self._render(self.toast, payload),
            achievement_id=payload.get("achievement_id"),
        )


def _streak_text(payload: Mapping[str, Any]) -> str:
    streak = payload["streak"]
    if streak == 3:
        return "🔥 3-day streak! Keep it going!"
    if streak == 7:
        return "⚡ 7-day streak! You're on fire!"
    return f"💪 {streak}-day streak! Incredible!"


# ============================================================================
# TEMPLATE REGISTRY
# ============================================================================

NOTIFICATION_TEMPLATES: Dict[str, NotificationTemplate] = {
    EVENT_LEVELED_UP: NotificationTemplate(
        kind=NotificationKind.LEARNING_MILESTONE,
        title="Level Up",
        template="Congratulations! You've reached level {new_level}!",
        toast="🎉 Level Up! You're now level {new_level}!",
    ),
    EVENT_ACHIEVEMENT_UNLOCKED: NotificationTemplate(
        kind=NotificationKind.ACHIEVEMENT,
        title="Achievement Unlocked",
        template='You unlocked "{name}" - {description}',
        toast="🏆 Achievement Unlocked: {name}!",
    ),
    EVENT_STREAK_MILESTONE: NotificationTemplate(
        kind=NotificationKind.STREAK_REMINDER,
        title="Streak Milestone",
        template=_streak_text,
        toast=_streak_text,
    ),
}


def build_notification(
    event: Union[DomainEvent, Mapping[str, Any]],
    event_name: Optional[str] = None,
) -> Optional[NotificationMessage]:
    """
    Render the notification for an event, if it has one.

    Args:
        event: DomainEvent, or a published payload carrying "event_name"
        event_name: Overrides the name found on the event

    Returns:
        NotificationMessage, or None for events without a template

    Example:
        >>> build_notification({"event_name": "progress.leveled_up",
        ...                     "user_id": "u1", "new_level": 3}).message
        "Congratulations! You've reached level 3!"
    """
    if isinstance(event, DomainEvent):
        payload: Mapping[str, Any] = event.payload
        name = event_name or event.event_name
    else:
        payload = event
        name = event_name or event.get("event_name", "")

    template = NOTIFICATION_TEMPLATES.get(name)
    if template is None:
        return None
    return template.format(payload)


# ============================================================================
# EVENT BUS LISTENER
# ============================================================================


class ProgressNotificationListener:
    """
    Forwards progress events to a NotificationSink.

    Subscribes to ``progress.*`` at NORMAL priority. Delivery failures
    propagate to the event bus, which logs them and keeps going.

    Usage
    -----
        listener = ProgressNotificationListener(inbox_sink)
        listener.attach(event_bus)
    """

    EVENT_PATTERN = "progress.*"

    def __init__(self, sink: NotificationSink) -> None:
        self._sink = sink
        self._listener_id: Optional[str] = None
        self._bus: Optional[EventBus] = None
        self.delivered: int = 0

    def attach(self, event_bus: EventBus) -> str:
        self._bus = event_bus
        self._listener_id = event_bus.subscribe(
            self.EVENT_PATTERN,
            self.handle,
            priority=ListenerPriority.NORMAL,
            identifier="progress.notifications",
        )
        logger.info(
            "Subscribed progress notification listener",
            extra={"event_name": self.EVENT_PATTERN},
        )
        return self._listener_id

    def detach(self) -> bool:
        if self._bus is None or self._listener_id is None:
            return False
        removed = self._bus.unsubscribe(self.EVENT_PATTERN, self._listener_id)
        self._bus = None
        self._listener_id = None
        return removed

    async def handle(self, payload: Dict[str, Any]) -> None:
        """EventBus callback: render and deliver, skipping silent events."""
        notification = build_notification(payload)
        if notification is None:
            return

        await self._sink.deliver(notification)
        self.delivered += 1
        logger.debug(
            "Delivered progress notification",
            extra={
                "user_id": notification.user_id,
                "notification_type": notification.kind.value,
            },
        )


def render_all(events: List[DomainEvent]) -> List[NotificationMessage]:
    """Notifications for a list of events, skipping silent ones."""
    rendered = (build_notification(event) for event in events)
    return [message for message in rendered if message is not None]
