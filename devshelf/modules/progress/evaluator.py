"""
Achievement Evaluator

Purpose
-------
Decide which catalog entries a snapshot has earned but not yet unlocked, and
report per-achievement progress for dashboards.

Compliance
----------
- Pure functions only (no side effects, no XP awarded here)
- Catalog order is preserved in every result
- Deterministic and testable

Design Notes
------------
Every locked entry is checked against the current counters, so a snapshot
that jumped past several tiers at once (an imported or corrected document)
gets all of them in a single pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from devshelf.domain.models.achievement import AchievementDefinition
from devshelf.domain.models.progress import ProgressSnapshot
from devshelf.modules.progress.catalog import AchievementCatalog, get_catalog


@dataclass(frozen=True)
class AchievementProgress:
    """
    How far a snapshot is from one achievement.

    Attributes
    ----------
    achievement : AchievementDefinition
        The catalog entry
    current : int
        Current value of the measured counter
    target : int
        Threshold that unlocks the entry
    unlocked : bool
        Whether the entry is already unlocked
    """

    achievement: AchievementDefinition
    current: int
    target: int
    unlocked: bool

    @property
    def remaining(self) -> int:
        return max(0, self.target - self.current)

    @property
    def percentage(self) -> float:
        """Progress toward the threshold in [0, 100]."""
        if self.unlocked or self.current >= self.target:
            return 100.0
        return round(self.current / self.target * 100.0, 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.achievement.id,
            "name": self.achievement.name,
            "icon": self.achievement.icon,
            "current": self.current,
            "target": self.target,
            "percentage": self.percentage,
            "unlocked": self.unlocked,
        }


def evaluate_achievements(
    snapshot: ProgressSnapshot,
    already_unlocked: Optional[Iterable[str]] = None,
    catalog: Optional[AchievementCatalog] = None,
) -> List[AchievementDefinition]:
    """
    Entries whose requirement is met and which are not yet unlocked.

    Args:
        snapshot: Progress to evaluate
        already_unlocked: Ids to skip (defaults to snapshot.achievements)
        catalog: Catalog to scan (defaults to the process catalog)

    Returns:
        Newly qualifying definitions in catalog order

    Example:
        >>> snapshot = ProgressSnapshot(total_resources_viewed=60)
        >>> [a.id for a in evaluate_achievements(snapshot)]
        ['views_10', 'views_50']
    """
    entries = catalog if catalog is not None else get_catalog()
    skip = snapshot.achievements if already_unlocked is None else frozenset(already_unlocked)

    return [
        definition
        for definition in entries
        if definition.id not in skip
        and definition.requirement.is_met_by(snapshot.counter_for(definition.requirement_type))
    ]


def achievement_progress(
    snapshot: ProgressSnapshot,
    catalog: Optional[AchievementCatalog] = None,
) -> List[AchievementProgress]:
    """Progress toward every catalog entry, in catalog order."""
    entries = catalog if catalog is not None else get_catalog()
    return [
        AchievementProgress(
            achievement=definition,
            current=snapshot.counter_for(definition.requirement_type),
            target=definition.threshold,
            unlocked=definition.id in snapshot.achievements,
        )
        for definition in entries
    ]


def next_achievements(
    snapshot: ProgressSnapshot,
    limit: int = 3,
    catalog: Optional[AchievementCatalog] = None,
) -> List[AchievementProgress]:
    """
    Locked entries closest to unlocking.

    Sorted by remaining count (fewest first); ties keep catalog order.
    """
    if limit <= 0:
        return []
    locked = [item for item in achievement_progress(snapshot, catalog) if not item.unlocked]
    # sorted() is stable, so equal remaining counts stay in catalog order
    return sorted(locked, key=lambda item: item.remaining)[:limit]
