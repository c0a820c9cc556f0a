"""
Progress Service Collaborators

Purpose
-------
Interfaces the ProgressService talks to. Concrete adapters (document store,
activity collection, notification inbox) live in the host application; this
package ships none.

Design Notes
------------
- Structural typing (typing.Protocol): any object with the right async
  methods works, including the in-memory fakes used in tests
- Adapters raise whatever their backend raises; the service wraps those
  failures in PersistenceError
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from devshelf.domain.models.progress import ActivityKind, ProgressSnapshot
    from devshelf.modules.progress.messages import NotificationMessage


@runtime_checkable
class ProgressRepository(Protocol):
    """Loads and stores one progress snapshot per user."""

    async def get(self, user_id: str) -> Optional[ProgressSnapshot]:
        """Stored snapshot, or None if the user has none yet."""
        ...

    async def save(self, snapshot: ProgressSnapshot) -> None:
        """Store the full snapshot (replace)."""
        ...


@runtime_checkable
class ActivityLog(Protocol):
    """Remembers which (user, resource, kind) activities were credited."""

    async def has_recorded(
        self, user_id: str, resource_id: str, kind: ActivityKind
    ) -> bool:
        ...

    async def record(self, user_id: str, resource_id: str, kind: ActivityKind) -> None:
        ...


@runtime_checkable
class NotificationSink(Protocol):
    """Delivers a rendered notification to the user's inbox."""

    async def deliver(self, notification: NotificationMessage) -> None:
        ...
