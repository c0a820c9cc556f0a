"""
Domain models package for DevShelf.

Purpose
-------
Immutable value objects the progress engine reads and returns. They carry
the clamping and conversion rules for stored data but no progression rules;
those live in devshelf.modules.progress.

Design Notes
------------
Domain models are separate from whatever documents the storage collaborator
keeps. Services convert with `ProgressSnapshot.from_dict` / `to_dict`.
"""

from .progress import ActivityKind, Badge, ProgressSnapshot, normalize_date
from .achievement import (
    AchievementDefinition,
    AchievementRequirement,
    RequirementType,
)
from .base import DomainEvent

__all__ = [
    "ActivityKind",
    "Badge",
    "ProgressSnapshot",
    "normalize_date",
    "AchievementDefinition",
    "AchievementRequirement",
    "RequirementType",
    "DomainEvent",
]
