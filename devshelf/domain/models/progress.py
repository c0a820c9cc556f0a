"""
Progress Domain Model for DevShelf.

Purpose
-------
The per-user progress snapshot consumed and produced by the progress engine,
plus the small value types around it (activity kinds, unlock badges).

This is separate from whatever document the storage collaborator keeps.
`ProgressSnapshot.from_dict` / `to_dict` convert between the two and are
tolerant of documents written by older versions of the application.

Responsibilities
----------------
- Hold counters, XP, level, streak state and unlocked achievements
- Clamp drifted numbers on construction instead of rejecting them
- Map requirement dimensions to counters

Non-Responsibilities
--------------------
- Awarding XP or unlocking achievements (the aggregator does)
- Persistence (the repository collaborator does)

Usage Example
-------------
>>> snapshot = ProgressSnapshot.new("user-1")
>>> snapshot.level
1
>>> ProgressSnapshot.from_dict({"xp": -30, "totalResourcesViewed": 4}).xp
0
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from devshelf.modules.shared.constants import (
    DATE_FORMAT,
    FIRST_TIME_ONLY_ACTIVITIES,
    REQUIREMENT_COUNTER_FIELDS,
)
from devshelf.modules.shared.exceptions import ValidationError
from devshelf.modules.shared.formulas import clamp_level, clamp_non_negative


# ============================================================================
# ACTIVITY KINDS
# ============================================================================


class ActivityKind(str, Enum):
    """Activities that earn XP."""

    VIEWED = "viewed"
    COMPLETED = "completed"
    BOOKMARKED = "bookmarked"
    SUBMITTED = "submitted"
    HELPFUL = "helpful"

    @classmethod
    def parse(cls, value: Any) -> "ActivityKind":
        """
        Read an activity kind from an enum member or a string.

        Raises
        ------
        ValidationError
            If the value names no known activity
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                "activity_kind",
                f"Unknown activity kind: {value!r}",
            ) from None

    @property
    def is_first_time_only(self) -> bool:
        """Credited at most once per (user, resource)."""
        return self.value in FIRST_TIME_ONLY_ACTIVITIES


# ============================================================================
# BADGE
# ============================================================================


# Year 5138 in seconds; anything larger is a millisecond epoch
_MILLISECOND_EPOCH_FLOOR = 100_000_000_000


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = clamp_non_negative(value)
        # Browser clients store Date.now() milliseconds
        if seconds > _MILLISECOND_EPOCH_FLOOR:
            seconds = seconds // 1000
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    return None


@dataclass(frozen=True)
class Badge:
    """
    Record of an unlocked achievement.

    Attributes
    ----------
    achievement_id : str
        Catalog id of the achievement
    name, description, icon : str
        Display metadata copied from the definition at unlock time
    unlocked_at : Optional[datetime]
        Unlock time (UTC); None when a stored record had no readable time
    """

    achievement_id: str
    name: str
    description: str
    icon: str
    unlocked_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.achievement_id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "unlocked_at": self.unlocked_at.isoformat() if self.unlocked_at else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Badge":
        return cls(
            achievement_id=str(data.get("id") or data.get("achievement_id") or ""),
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            icon=str(data.get("icon") or ""),
            unlocked_at=_parse_timestamp(data.get("unlocked_at", data.get("unlockedAt"))),
        )


# ============================================================================
# PROGRESS SNAPSHOT
# ============================================================================

_COUNTER_FIELDS: Tuple[str, ...] = (
    "xp",
    "current_streak",
    "longest_streak",
    "total_resources_viewed",
    "total_resources_completed",
    "total_resources_bookmarked",
    "total_resources_submitted",
    "total_helpful_marked",
)

# Keys used by documents written by the browser client
_DOCUMENT_KEY_ALIASES: Mapping[str, str] = {
    "userId": "user_id",
    "currentStreak": "current_streak",
    "longestStreak": "longest_streak",
    "lastVisitDate": "last_visit_date",
    "totalResourcesViewed": "total_resources_viewed",
    "totalResourcesCompleted": "total_resources_completed",
    "totalResourcesBookmarked": "total_resources_bookmarked",
    "totalResourcesSubmitted": "total_resources_submitted",
    "totalHelpfulMarked": "total_helpful_marked",
}


def normalize_date(value: Any) -> Optional[str]:
    """
    Normalize a calendar day to ``YYYY-MM-DD``.

    Accepts date/datetime objects and ISO strings (a time part is dropped).
    Returns None for empty or unreadable values.

    Example:
        >>> normalize_date("2024-03-09T23:10:00Z")
        '2024-03-09'
        >>> normalize_date("") is None
        True
    """
    if isinstance(value, datetime):
        return value.date().strftime(DATE_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, str) and value.strip():
        head = value.strip()[:10]
        try:
            return date.fromisoformat(head).strftime(DATE_FORMAT)
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class ProgressSnapshot:
    """
    Immutable per-user progress record.

    Every numeric field is clamped on construction (negative, non-finite or
    unreadable values become 0; level is at least 1), so a snapshot built from
    drifted storage data is always usable. Updates produce new instances via
    `with_changes`.

    Business Rules
    --------------
    - Counters and XP never decrease through the engine
    - `level` is recomputed from `xp` on every XP change
    - An achievement id appears at most once in `achievements`
    """

    user_id: str = ""
    xp: int = 0
    level: int = 1
    current_streak: int = 0
    longest_streak: int = 0
    last_visit_date: Optional[str] = None
    total_resources_viewed: int = 0
    total_resources_completed: int = 0
    total_resources_bookmarked: int = 0
    total_resources_submitted: int = 0
    total_helpful_marked: int = 0
    achievements: FrozenSet[str] = field(default_factory=frozenset)
    badges: Tuple[Badge, ...] = ()

    def __post_init__(self) -> None:
        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "user_id", "" if self.user_id is None else str(self.user_id))
        for name in _COUNTER_FIELDS:
            object.__setattr__(self, name, clamp_non_negative(getattr(self, name)))
        object.__setattr__(self, "level", clamp_level(self.level))
        object.__setattr__(self, "last_visit_date", normalize_date(self.last_visit_date))
        object.__setattr__(
            self,
            "achievements",
            frozenset(
                item for item in _as_items(self.achievements) if isinstance(item, str) and item
            ),
        )
        object.__setattr__(
            self,
            "badges",
            _dedupe_badges(item for item in _as_items(self.badges) if isinstance(item, Badge)),
        )

    # ========================================================================
    # FACTORIES
    # ========================================================================

    @classmethod
    def new(cls, user_id: str = "") -> "ProgressSnapshot":
        """Fresh snapshot: every counter 0, level 1."""
        return cls(user_id=user_id)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProgressSnapshot":
        """
        Build a snapshot from a stored document.

        Accepts snake_case keys and the camelCase keys of the browser client,
        ignores unknown keys and clamps bad values.
        """
        values: Dict[str, Any] = {}
        known = {f.name for f in dataclasses.fields(cls)}
        for key, value in data.items():
            name = _DOCUMENT_KEY_ALIASES.get(key, key)
            if name in known:
                values[name] = value

        values["badges"] = tuple(
            badge if isinstance(badge, Badge) else Badge.from_dict(badge)
            for badge in _as_items(values.get("badges"))
            if isinstance(badge, (Badge, Mapping))
        )
        values["achievements"] = _as_items(values.get("achievements"))
        return cls(**values)

    # ========================================================================
    # QUERIES
    # ========================================================================

    def counter_for(self, requirement_type: Any) -> int:
        """
        Counter measured by an achievement requirement dimension.

        Unknown dimensions read as 0, so an entry with a dimension this
        snapshot does not track simply never unlocks.
        """
        key = getattr(requirement_type, "value", requirement_type)
        field_name = REQUIREMENT_COUNTER_FIELDS.get(str(key))
        if field_name is None:
            return 0
        return getattr(self, field_name)

    def has_unlocked(self, achievement_id: str) -> bool:
        return achievement_id in self.achievements

    # ========================================================================
    # UPDATES
    # ========================================================================

    def with_changes(self, **changes: Any) -> "ProgressSnapshot":
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Storage document for this snapshot (snake_case keys)."""
        return {
            "user_id": self.user_id,
            "xp": self.xp,
            "level": self.level,
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "last_visit_date": self.last_visit_date,
            "total_resources_viewed": self.total_resources_viewed,
            "total_resources_completed": self.total_resources_completed,
            "total_resources_bookmarked": self.total_resources_bookmarked,
            "total_resources_submitted": self.total_resources_submitted,
            "total_helpful_marked": self.total_helpful_marked,
            "achievements": sorted(self.achievements),
            "badges": [badge.to_dict() for badge in self.badges],
        }


def _as_items(value: Any) -> Tuple[Any, ...]:
    """Elements of a stored list; a lone string is one element, anything else none."""
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(value)
    return ()


def _dedupe_badges(badges: Iterable[Badge]) -> Tuple[Badge, ...]:
    seen = set()
    unique = []
    for badge in badges:
        if badge.achievement_id in seen:
            continue
        seen.add(badge.achievement_id)
        unique.append(badge)
    return tuple(unique)
