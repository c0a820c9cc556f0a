"""
Achievement Domain Models for DevShelf.

Purpose
-------
Immutable value objects describing achievement definitions: what an
achievement is called, what it rewards, and which counter threshold unlocks
it.

Responsibilities
----------------
- Define the closed set of requirement dimensions
- Describe a single catalog entry and its requirement
- Build the Badge record written when an achievement unlocks

Non-Responsibilities
--------------------
- Holding the list of achievements (the catalog module does)
- Deciding whether an achievement unlocks (the evaluator does)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from devshelf.domain.models.progress import Badge


class RequirementType(str, Enum):
    """Counter dimension an achievement threshold is measured against."""

    STREAK = "streak"
    VIEWS = "views"
    COMPLETED = "completed"
    SUBMISSIONS = "submissions"
    HELPFUL = "helpful"
    FAVORITES = "favorites"

    @classmethod
    def parse(cls, value: Any) -> "RequirementType":
        """
        Read a requirement type from an enum member or a string.

        Raises
        ------
        CatalogError
            If the value names no known dimension
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            from devshelf.modules.shared.exceptions import CatalogError

            raise CatalogError(None, f"Unknown requirement type: {value!r}") from None


@dataclass(frozen=True)
class AchievementRequirement:
    """
    Threshold on one counter dimension.

    Attributes
    ----------
    type : RequirementType
        Counter dimension
    count : int
        Minimum counter value that satisfies the requirement
    """

    type: RequirementType
    count: int

    def is_met_by(self, counter: int) -> bool:
        return counter >= self.count

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "count": self.count}


@dataclass(frozen=True)
class AchievementDefinition:
    """
    A catalog entry. Immutable for the lifetime of the process.

    Attributes
    ----------
    id : str
        Unique identifier (e.g. "views_50")
    name : str
        Display name
    description : str
        One-line description of what unlocks it
    icon : str
        Icon glyph
    xp_reward : int
        XP granted on unlock
    requirement : AchievementRequirement
        Unlock condition
    """

    id: str
    name: str
    description: str
    icon: str
    xp_reward: int
    requirement: AchievementRequirement

    @property
    def requirement_type(self) -> RequirementType:
        return self.requirement.type

    @property
    def threshold(self) -> int:
        return self.requirement.count

    def to_badge(self, unlocked_at: Optional[datetime] = None) -> Badge:
        """Build the unlock record for this achievement."""
        return Badge(
            achievement_id=self.id,
            name=self.name,
            description=self.description,
            icon=self.icon,
            unlocked_at=unlocked_at or datetime.now(timezone.utc),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "xp_reward": self.xp_reward,
            "requirement": self.requirement.to_dict(),
        }
