"""
Achievement Catalog

Purpose
-------
The ordered, immutable list of achievement definitions: what exists, what it
rewards, and which counter threshold unlocks it. Tiers of the same dimension
(views_10, views_50, ...) are independent entries.

Responsibilities
----------------
- Hold the built-in catalog in its canonical order
- Validate definitions at load time (unique ids, sane numbers)
- Extend the built-in catalog from a YAML file (Config.ACHIEVEMENTS_FILE)

Non-Responsibilities
--------------------
- Deciding what unlocks (evaluator)
- Awarding XP (aggregator)

Design Notes
------------
Catalog order is significant: evaluation results, unlock events and badges
all follow it. Extension entries are appended after the built-in entries and
never reorder them.

YAML extension format::

    achievements:
      - id: views_1000
        name: Archivist
        description: View 1000 resources
        icon: "📦"
        xp_reward: 2500
        requirement: {type: views, count: 1000}

A bare top-level list of entries is accepted as well.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

import yaml

from devshelf.core.config import Config
from devshelf.core.logging.logger import get_logger
from devshelf.domain.models.achievement import (
    AchievementDefinition,
    AchievementRequirement,
    RequirementType,
)
from devshelf.modules.shared.exceptions import CatalogError

logger = get_logger(__name__)


def _define(
    achievement_id: str,
    name: str,
    description: str,
    icon: str,
    xp_reward: int,
    requirement_type: RequirementType,
    count: int,
) -> AchievementDefinition:
    return AchievementDefinition(
        id=achievement_id,
        name=name,
        description=description,
        icon=icon,
        xp_reward=xp_reward,
        requirement=AchievementRequirement(type=requirement_type, count=count),
    )


# ============================================================================
# BUILT-IN DEFINITIONS
# ============================================================================

ACHIEVEMENTS: Tuple[AchievementDefinition, ...] = (
    # Streak
    _define("streak_3", "Getting Started", "Visit 3 days in a row", "🔥", 50, RequirementType.STREAK, 3),
    _define("streak_7", "Week Warrior", "Visit 7 days in a row", "⚡", 150, RequirementType.STREAK, 7),
    _define("streak_30", "Monthly Master", "Visit 30 days in a row", "💪", 500, RequirementType.STREAK, 30),
    _define("streak_100", "Century Club", "Visit 100 days in a row", "👑", 2000, RequirementType.STREAK, 100),
    # Views
    _define("views_10", "Curious Mind", "View 10 resources", "👀", 25, RequirementType.VIEWS, 10),
    _define("views_50", "Knowledge Seeker", "View 50 resources", "🔍", 100, RequirementType.VIEWS, 50),
    _define("views_100", "Explorer", "View 100 resources", "🗺️", 250, RequirementType.VIEWS, 100),
    _define("views_500", "Master Explorer", "View 500 resources", "🌟", 1000, RequirementType.VIEWS, 500),
    # Completed
    _define("completed_5", "First Steps", "Complete 5 resources", "✅", 50, RequirementType.COMPLETED, 5),
    _define("completed_25", "Dedicated Learner", "Complete 25 resources", "📚", 200, RequirementType.COMPLETED, 25),
    _define("completed_100", "Learning Machine", "Complete 100 resources", "🎓", 750, RequirementType.COMPLETED, 100),
    # Submissions
    _define("submit_1", "Contributor", "Submit your first resource", "📝", 100, RequirementType.SUBMISSIONS, 1),
    _define("submit_5", "Active Contributor", "Submit 5 resources", "✨", 300, RequirementType.SUBMISSIONS, 5),
    _define("submit_20", "Content Creator", "Submit 20 resources", "🏆", 1000, RequirementType.SUBMISSIONS, 20),
    # Helpful
    _define("helpful_10", "Helpful Friend", "Mark 10 resources as helpful", "👍", 50, RequirementType.HELPFUL, 10),
    _define("helpful_50", "Community Helper", "Mark 50 resources as helpful", "💖", 200, RequirementType.HELPFUL, 50),
    # Favorites
    _define("favorites_10", "Collector", "Favorite 10 resources", "⭐", 30, RequirementType.FAVORITES, 10),
    _define("favorites_50", "Curator", "Favorite 50 resources", "💎", 150, RequirementType.FAVORITES, 50),
)


# ============================================================================
# CATALOG
# ============================================================================


class AchievementCatalog:
    """
    Immutable ordered registry of achievement definitions.

    Iterates in definition order. Construction validates every entry and
    raises CatalogError on the first problem found.

    Examples
    --------
    >>> catalog = AchievementCatalog(ACHIEVEMENTS)
    >>> len(catalog)
    18
    >>> catalog.get("submit_1").xp_reward
    100
    >>> [a.id for a in catalog.by_requirement(RequirementType.HELPFUL)]
    ['helpful_10', 'helpful_50']
    """

    __slots__ = ("_entries", "_by_id")

    def __init__(self, definitions: Iterable[AchievementDefinition]) -> None:
        entries = tuple(definitions)
        by_id: Dict[str, AchievementDefinition] = {}
        for definition in entries:
            _validate_definition(definition)
            if definition.id in by_id:
                raise CatalogError(definition.id, "Duplicate achievement id")
            by_id[definition.id] = definition

        self._entries = entries
        self._by_id = by_id

    def __iter__(self) -> Iterator[AchievementDefinition]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, achievement_id: object) -> bool:
        return achievement_id in self._by_id

    def __repr__(self) -> str:
        return f"AchievementCatalog(entries={len(self._entries)})"

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(definition.id for definition in self._entries)

    def get(self, achievement_id: str) -> Optional[AchievementDefinition]:
        return self._by_id.get(achievement_id)

    def by_requirement(
        self, requirement_type: Union[RequirementType, str]
    ) -> List[AchievementDefinition]:
        """Entries measured on one counter dimension, in catalog order."""
        wanted = RequirementType.parse(requirement_type)
        return [d for d in self._entries if d.requirement_type is wanted]

    def extend(self, definitions: Iterable[AchievementDefinition]) -> "AchievementCatalog":
        """Return a new catalog with `definitions` appended."""
        return AchievementCatalog((*self._entries, *definitions))

    @classmethod
    def from_yaml(
        cls,
        path: Union[str, Path],
        base: Optional["AchievementCatalog"] = None,
    ) -> "AchievementCatalog":
        """
        Load extension entries from a YAML file and append them to `base`.

        Args:
            path: YAML file with an ``achievements`` list (or a bare list)
            base: Catalog to extend (defaults to the built-in catalog)

        Raises:
            CatalogError: If the file cannot be read or an entry is invalid
        """
        source = Path(path)
        try:
            with open(source, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise CatalogError(None, f"Cannot load achievements file {source}: {e}") from e

        if isinstance(data, Mapping):
            data = data.get("achievements")
        if data is None:
            data = []
        if not isinstance(data, list):
            raise CatalogError(None, f"Achievements file {source} must contain a list of entries")

        definitions = [definition_from_mapping(entry) for entry in data]
        catalog = (base if base is not None else DEFAULT_CATALOG).extend(definitions)

        logger.info(
            "Loaded achievement catalog extension",
            extra={"file": str(source), "added": len(definitions), "total": len(catalog)},
        )
        return catalog


def definition_from_mapping(entry: Any) -> AchievementDefinition:
    """
    Build one definition from a parsed YAML/JSON mapping.

    Accepts ``xp_reward`` or ``xpReward``. Raises CatalogError for missing or
    malformed fields.
    """
    if not isinstance(entry, Mapping):
        raise CatalogError(None, f"Achievement entry must be a mapping, got {type(entry).__name__}")

    achievement_id = entry.get("id")
    if not achievement_id or not isinstance(achievement_id, str):
        raise CatalogError(None, "Achievement entry is missing an id")

    requirement = entry.get("requirement")
    if not isinstance(requirement, Mapping):
        raise CatalogError(achievement_id, "Missing requirement mapping")

    try:
        reward = int(entry.get("xp_reward", entry.get("xpReward", 0)))
        count = int(requirement.get("count"))
    except (TypeError, ValueError):
        raise CatalogError(achievement_id, "xp_reward and requirement.count must be integers") from None

    try:
        requirement_type = RequirementType.parse(requirement.get("type"))
    except CatalogError as e:
        raise CatalogError(achievement_id, e.reason) from None

    return AchievementDefinition(
        id=achievement_id,
        name=str(entry.get("name") or achievement_id),
        description=str(entry.get("description") or ""),
        icon=str(entry.get("icon") or ""),
        xp_reward=reward,
        requirement=AchievementRequirement(type=requirement_type, count=count),
    )


def _validate_definition(definition: AchievementDefinition) -> None:
    if not isinstance(definition, AchievementDefinition):
        raise CatalogError(None, f"Not an achievement definition: {definition!r}")
    if not definition.id:
        raise CatalogError(None, "Achievement id must not be empty")
    if definition.xp_reward < 0:
        raise CatalogError(definition.id, "XP reward must not be negative")
    if definition.threshold < 1:
        raise CatalogError(definition.id, "Requirement count must be at least 1")
    if not isinstance(definition.requirement_type, RequirementType):
        raise CatalogError(definition.id, f"Unknown requirement type: {definition.requirement_type!r}")


DEFAULT_CATALOG = AchievementCatalog(ACHIEVEMENTS)


@lru_cache(maxsize=1)
def get_catalog() -> AchievementCatalog:
    """
    Catalog used when callers do not pass one explicitly.

    The built-in catalog, extended from Config.ACHIEVEMENTS_FILE when that is
    set. Loaded once per process; call ``get_catalog.cache_clear()`` after
    changing the setting.
    """
    extension = Config.ACHIEVEMENTS_FILE
    if extension is None:
        return DEFAULT_CATALOG
    return AchievementCatalog.from_yaml(extension, base=DEFAULT_CATALOG)
