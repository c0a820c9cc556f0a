"""
DevShelf Progression Constants

Purpose
-------
Domain-level constants for the progression system: the level curve base,
per-activity XP rewards, first-time-only activity kinds and the streak
celebration rule.

IMPORTANT:
Achievement definitions and their rewards live in the achievement catalog,
not here. Infrastructure settings (log level, timezone) belong in
devshelf.core.config.

Design Notes
------------
- Values are annotated with typing.Final to signal immutability
- Activity kinds are keyed by their string value so this module has no
  imports from the domain layer
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Final, FrozenSet, Mapping

# ============================================================================
# LEVEL CURVE
# ============================================================================

LEVEL_XP_BASE: Final[int] = 100  # level = floor(sqrt(xp / base)) + 1

# ============================================================================
# ACTIVITY REWARDS
# ============================================================================

ACTIVITY_XP_REWARDS: Final[Mapping[str, int]] = MappingProxyType(
    {
        "viewed": 5,
        "completed": 25,
        "bookmarked": 10,
        "submitted": 50,
        "helpful": 5,
    }
)

# Snapshot counter incremented by each activity kind
ACTIVITY_COUNTER_FIELDS: Final[Mapping[str, str]] = MappingProxyType(
    {
        "viewed": "total_resources_viewed",
        "completed": "total_resources_completed",
        "bookmarked": "total_resources_bookmarked",
        "submitted": "total_resources_submitted",
        "helpful": "total_helpful_marked",
    }
)

# Snapshot counter read for each achievement requirement dimension.
# Favorites are counted through bookmarks.
REQUIREMENT_COUNTER_FIELDS: Final[Mapping[str, str]] = MappingProxyType(
    {
        "streak": "current_streak",
        "views": "total_resources_viewed",
        "completed": "total_resources_completed",
        "submissions": "total_resources_submitted",
        "helpful": "total_helpful_marked",
        "favorites": "total_resources_bookmarked",
    }
)

# Human-readable reason shown next to the XP toast
ACTIVITY_XP_REASONS: Final[Mapping[str, str]] = MappingProxyType(
    {
        "viewed": "viewing a resource",
        "completed": "completing a resource",
        "bookmarked": "bookmarking a resource",
        "submitted": "submitting a resource",
        "helpful": "marking as helpful",
    }
)

# Credited at most once per (user, resource); dedup is the activity log's job
FIRST_TIME_ONLY_ACTIVITIES: Final[FrozenSet[str]] = frozenset(
    {"viewed", "completed", "bookmarked"}
)

# ============================================================================
# STREAKS
# ============================================================================

STREAK_MILESTONES: Final[FrozenSet[int]] = frozenset({3, 7})
STREAK_MILESTONE_INTERVAL: Final[int] = 10  # then every 10 days

DATE_FORMAT: Final[str] = "%Y-%m-%d"
