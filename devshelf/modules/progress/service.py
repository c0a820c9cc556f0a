"""
Progress Service
================

Purpose
-------
Async orchestration around the pure progress engine: load a user's snapshot,
apply an activity or a daily check-in, save the result and publish the
resulting events.

Domain
------
- Activity tracking with first-time-only dedup (view, complete, bookmark)
- Daily streak check-ins in the configured timezone
- Dashboard summaries (level bar, streaks, badges, next achievements)

Dependencies
------------
- ProgressRepository: snapshot storage
- ActivityLog: (user, resource, kind) dedup and activity history
- EventBus: publishes `progress.*` events after a successful save
- Config: STREAK_TIMEZONE

Design Notes
------------
- A per-user asyncio.Lock serializes read-modify-write inside one process;
  cross-process serialization is the repository adapter's job
- Events are published after the lock is released, so slow listeners never
  block the next report for the same user
- Collaborator failures are logged and re-raised as PersistenceError; domain
  exceptions (ValidationError) pass through unchanged
"""

from __future__ import annotations

import asyncio
import weakref
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Dict,
    List,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
)
from zoneinfo import ZoneInfo

from devshelf.core.config import Config
from devshelf.core.exceptions import PersistenceError
from devshelf.core.logging.logger import LogContext, get_logger
from devshelf.domain.models.progress import ActivityKind, Badge, ProgressSnapshot
from devshelf.modules.progress.aggregator import (
    ActivityResult,
    StreakResult,
    report_activity,
    report_streak_checkpoint,
)
from devshelf.modules.progress.catalog import AchievementCatalog, get_catalog
from devshelf.modules.progress.evaluator import (
    AchievementProgress,
    achievement_progress,
    next_achievements,
)
from devshelf.modules.shared.base_service import BaseService
from devshelf.modules.shared.exceptions import DevShelfError, ValidationError
from devshelf.modules.shared.formulas import (
    progress_fraction,
    xp_threshold_for_level,
    xp_to_next_level,
)

if TYPE_CHECKING:
    from logging import Logger

    from devshelf.core.event.bus import EventBus
    from devshelf.domain.models.base import DomainEvent
    from devshelf.modules.progress.ports import ActivityLog, ProgressRepository

T = TypeVar("T")


@dataclass(frozen=True)
class ProgressSummary:
    """Everything a progress dashboard shows for one user."""

    user_id: str
    level: int
    xp: int
    next_level_xp: int
    xp_to_next_level: int
    progress_percent: float
    current_streak: int
    longest_streak: int
    badges: Tuple[Badge, ...] = ()
    achievements: Tuple[AchievementProgress, ...] = ()
    next_achievements: Tuple[AchievementProgress, ...] = ()

    @property
    def progress_percent_rounded(self) -> int:
        return int(round(self.progress_percent))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "level": self.level,
            "xp": self.xp,
            "next_level_xp": self.next_level_xp,
            "xp_to_next_level": self.xp_to_next_level,
            "progress_percent": self.progress_percent_rounded,
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "badges": [badge.to_dict() for badge in self.badges],
            "achievements": [item.to_dict() for item in self.achievements],
            "next_achievements": [item.to_dict() for item in self.next_achievements],
        }


class ProgressService(BaseService):
    """
    Service for tracking user activity, streaks and achievements.

    Public Methods
    --------------
    - get_or_create_progress() -> Load or initialize a snapshot
    - track_activity() -> Credit one activity on one resource
    - check_in() -> Count today's visit toward the streak
    - get_summary() -> Dashboard view of a user's progress
    """

    def __init__(
        self,
        repository: ProgressRepository,
        activity_log: ActivityLog,
        event_bus: EventBus,
        logger: Optional[Logger] = None,
        *,
        catalog: Optional[AchievementCatalog] = None,
        config: Type[Config] = Config,
    ) -> None:
        super().__init__(config, event_bus, logger or get_logger(__name__))
        self._repository = repository
        self._activity_log = activity_log
        self._catalog = catalog
        # Entries vanish once no coroutine holds or awaits the lock.
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    # ========================================================================
    # INTERNALS
    # ========================================================================

    @property
    def catalog(self) -> AchievementCatalog:
        return self._catalog if self._catalog is not None else get_catalog()

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        return lock

    @staticmethod
    def _validate_user_id(user_id: Any) -> str:
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValidationError("user_id", "User id must be a non-empty string")
        return user_id

    async def _call(self, operation: str, awaitable: Awaitable[T], **context: Any) -> T:
        """Await a collaborator call, wrapping backend failures."""
        try:
            return await awaitable
        except DevShelfError:
            raise
        except Exception as e:
            self.log_error(operation, e, **context)
            raise PersistenceError(operation, e) from e

    async def _load(self, user_id: str) -> ProgressSnapshot:
        snapshot = await self._call("progress.get", self._repository.get(user_id), user_id=user_id)
        if snapshot is not None:
            return snapshot

        snapshot = ProgressSnapshot.new(user_id)
        await self._call("progress.save", self._repository.save(snapshot), user_id=user_id)
        self.log.info("Created progress record", extra={"user_id": user_id})
        return snapshot

    async def _publish(self, events: Tuple[DomainEvent, ...]) -> None:
        for event in events:
            await self.emit_event(event.event_name, event.payload)

    def _today(self) -> date:
        zone_name = self.get_config("STREAK_TIMEZONE", default="UTC")
        zone: tzinfo = timezone.utc if zone_name == "UTC" else ZoneInfo(zone_name)
        return datetime.now(zone).date()

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    async def get_or_create_progress(self, user_id: str) -> ProgressSnapshot:
        """
        Load a user's snapshot, creating and saving a fresh one if missing.

        Raises:
            ValidationError: If user_id is empty
            PersistenceError: If the repository fails
        """
        user_id = self._validate_user_id(user_id)
        async with self._lock_for(user_id):
            return await self._load(user_id)

    async def track_activity(
        self,
        user_id: str,
        kind: Union[ActivityKind, str],
        resource_id: str,
    ) -> Optional[ActivityResult]:
        """
        Credit one activity on one resource.

        First-time-only kinds (viewed, completed, bookmarked) already recorded
        for this (user, resource) award nothing and return None.

        Args:
            user_id: User performing the activity
            kind: Activity kind
            resource_id: Resource the activity is about

        Returns:
            ActivityResult with the saved snapshot, or None if deduplicated

        Raises:
            ValidationError: If user_id is empty or kind is unknown
            PersistenceError: If a collaborator fails

        Example:
            >>> result = await service.track_activity("u1", "submitted", "res-9")
            >>> result.unlocked_ids
            ['submit_1']
        """
        user_id = self._validate_user_id(user_id)
        activity = ActivityKind.parse(kind)

        async with LogContext(
            user_id=user_id,
            resource_id=resource_id,
            activity=activity.value,
            component="progress",
            operation="track_activity",
        ):
            async with self._lock_for(user_id):
                if activity.is_first_time_only:
                    seen = await self._call(
                        "activity.has_recorded",
                        self._activity_log.has_recorded(user_id, resource_id, activity),
                        user_id=user_id,
                    )
                    if seen:
                        self.log.debug(
                            "Activity already credited",
                            extra={"user_id": user_id, "resource_id": resource_id},
                        )
                        return None

                snapshot = await self._load(user_id)
                result = report_activity(activity, snapshot, catalog=self.catalog)

                await self._call(
                    "progress.save", self._repository.save(result.snapshot), user_id=user_id
                )
                await self._call(
                    "activity.record",
                    self._activity_log.record(user_id, resource_id, activity),
                    user_id=user_id,
                )

            self.log_operation(
                "track_activity",
                user_id=user_id,
                resource_id=resource_id,
                xp_awarded=result.xp_awarded,
                level=result.snapshot.level,
                unlocked=result.unlocked_ids,
            )
            await self._publish(result.events)
            return result

    async def check_in(
        self, user_id: str, today: Optional[Union[date, str]] = None
    ) -> StreakResult:
        """
        Count today's visit toward the daily streak.

        `today` defaults to the current date in Config.STREAK_TIMEZONE. A
        second check-in on the same day changes nothing and is not saved.

        Raises:
            ValidationError: If user_id is empty or today is not a date
            PersistenceError: If the repository fails
        """
        user_id = self._validate_user_id(user_id)
        day = today if today is not None else self._today()

        async with LogContext(user_id=user_id, component="progress", operation="check_in"):
            async with self._lock_for(user_id):
                snapshot = await self._load(user_id)
                result = report_streak_checkpoint(snapshot, day, catalog=self.catalog)
                if result.already_counted:
                    return result

                await self._call(
                    "progress.save", self._repository.save(result.snapshot), user_id=user_id
                )

            self.log_operation(
                "check_in",
                user_id=user_id,
                streak=result.current_streak,
                streak_broken=result.streak_broken,
                unlocked=[d.id for d in result.newly_unlocked],
            )
            await self._publish(result.events)
            return result

    async def get_summary(self, user_id: str, next_limit: int = 3) -> ProgressSummary:
        """Dashboard view of a user's progress (read only, except first-time creation)."""
        snapshot = await self.get_or_create_progress(user_id)
        catalog = self.catalog

        progress: List[AchievementProgress] = achievement_progress(snapshot, catalog)
        return ProgressSummary(
            user_id=snapshot.user_id,
            level=snapshot.level,
            xp=snapshot.xp,
            next_level_xp=xp_threshold_for_level(snapshot.level),
            xp_to_next_level=xp_to_next_level(snapshot.xp, snapshot.level),
            progress_percent=progress_fraction(snapshot.xp, snapshot.level),
            current_streak=snapshot.current_streak,
            longest_streak=snapshot.longest_streak,
            badges=snapshot.badges,
            achievements=tuple(progress),
            next_achievements=tuple(next_achievements(snapshot, next_limit, catalog)),
        )
