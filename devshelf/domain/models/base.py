"""
Base domain model building blocks for DevShelf.

Purpose
-------
Shared abstractions for the domain layer: the DomainEvent record that the
progress engine returns alongside every state change.

Non-Responsibilities
--------------------
- Persistence (handled by the repository collaborator)
- Delivery of events (handled by the event bus and its listeners)

Design Patterns
---------------
- **Value Object**: snapshots and definitions are frozen dataclasses
- **Domain Events**: the engine describes what happened as events; the
  service publishes them after the new state is saved
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict


@dataclass(frozen=True)
class DomainEvent:
    """
    Represents a domain event that has occurred.

    Attributes
    ----------
    event_name : str
        Event name (e.g., "progress.leveled_up")
    payload : Dict[str, Any]
        Event payload with relevant data
    occurred_at : datetime
        When the event occurred (UTC)
    """

    event_name: str
    payload: Dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_name": self.event_name,
            "payload": dict(self.payload),
            "occurred_at": self.occurred_at.isoformat(),
        }
