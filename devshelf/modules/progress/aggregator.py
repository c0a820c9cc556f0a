"""
Progress Aggregator

Purpose
-------
Apply one reported activity or one daily check-in to a progress snapshot and
return the complete outcome: the new snapshot, XP awarded, achievements
unlocked and the domain events describing what happened.

Responsibilities
----------------
- Award base XP per activity kind and bump the matching counter
- Keep `level` in step with `xp`
- Unlock achievements and add their XP rewards
- Advance, keep or reset the daily streak

Non-Responsibilities
--------------------
- First-time-only dedup (the activity log collaborator decides whether a
  report happens at all)
- Persistence and event delivery (ProgressService)

Compliance
----------
- Pure functions: inputs are never mutated, results carry a new snapshot
- No I/O and no config access

Design Notes
------------
Achievements are evaluated once per report, after the counter change.
Achievement rewards are XP only and XP is not a requirement dimension, so a
second evaluation round could never unlock anything new.

Events are ordered: streak events, XP gained, achievement unlocks in catalog
order, then a single level-up event if the final level is higher than the
level stored on the input snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, List, Optional, Tuple, Union

from devshelf.domain.models.achievement import AchievementDefinition
from devshelf.domain.models.base import DomainEvent
from devshelf.domain.models.progress import (
    ActivityKind,
    ProgressSnapshot,
    normalize_date,
)
from devshelf.modules.progress.catalog import AchievementCatalog
from devshelf.modules.progress.evaluator import evaluate_achievements
from devshelf.modules.shared.constants import (
    ACTIVITY_COUNTER_FIELDS,
    ACTIVITY_XP_REASONS,
    ACTIVITY_XP_REWARDS,
)
from devshelf.modules.shared.exceptions import ValidationError
from devshelf.modules.shared.formulas import (
    clamp_non_negative,
    is_streak_milestone,
    level_for_xp,
)

DateLike = Union[date, datetime, str]

# ============================================================================
# EVENT NAMES
# ============================================================================

EVENT_XP_GAINED = "progress.xp_gained"
EVENT_LEVELED_UP = "progress.leveled_up"
EVENT_ACHIEVEMENT_UNLOCKED = "progress.achievement_unlocked"
EVENT_STREAK_EXTENDED = "progress.streak_extended"
EVENT_STREAK_BROKEN = "progress.streak_broken"
EVENT_STREAK_MILESTONE = "progress.streak_milestone"


# ============================================================================
# RESULTS
# ============================================================================


@dataclass(frozen=True)
class ActivityResult:
    """
    Outcome of one activity report or raw XP award.

    Attributes
    ----------
    snapshot : ProgressSnapshot
        Updated progress, ready to persist
    xp_awarded : int
        Base XP plus achievement rewards
    newly_unlocked : Tuple[AchievementDefinition, ...]
        Achievements unlocked by this report, catalog order
    previous_level : int
        Level stored on the input snapshot
    events : Tuple[DomainEvent, ...]
        What happened, in order
    kind : Optional[ActivityKind]
        Reported activity (None for a raw XP award)
    """

    snapshot: ProgressSnapshot
    xp_awarded: int
    newly_unlocked: Tuple[AchievementDefinition, ...]
    previous_level: int
    events: Tuple[DomainEvent, ...] = ()
    kind: Optional[ActivityKind] = None

    @property
    def leveled_up(self) -> bool:
        return self.snapshot.level > self.previous_level

    @property
    def levels_gained(self) -> int:
        return max(0, self.snapshot.level - self.previous_level)

    @property
    def unlocked_ids(self) -> List[str]:
        return [definition.id for definition in self.newly_unlocked]


@dataclass(frozen=True)
class StreakResult:
    """
    Outcome of one daily check-in.

    Attributes
    ----------
    snapshot : ProgressSnapshot
        Updated progress (unchanged when already_counted)
    streak_broken : bool
        A usable previous visit existed and the streak reset to 1
    already_counted : bool
        Today was already counted; nothing changed
    newly_unlocked : Tuple[AchievementDefinition, ...]
        Streak achievements unlocked by this check-in
    xp_awarded : int
        XP from those achievements
    previous_level : int
        Level stored on the input snapshot
    events : Tuple[DomainEvent, ...]
        What happened, in order
    """

    snapshot: ProgressSnapshot
    streak_broken: bool
    already_counted: bool
    newly_unlocked: Tuple[AchievementDefinition, ...] = ()
    xp_awarded: int = 0
    previous_level: int = 1
    events: Tuple[DomainEvent, ...] = ()

    @property
    def current_streak(self) -> int:
        return self.snapshot.current_streak

    @property
    def milestone_reached(self) -> bool:
        """A celebrated streak length (3, 7, every 10) was reached today."""
        return not self.already_counted and is_streak_milestone(self.snapshot.current_streak)

    @property
    def leveled_up(self) -> bool:
        return self.snapshot.level > self.previous_level


# ============================================================================
# HELPERS
# ============================================================================


def _event(event_name: str, snapshot: ProgressSnapshot, now: datetime, **payload: Any) -> DomainEvent:
    return DomainEvent(
        event_name=event_name,
        payload={"user_id": snapshot.user_id, **payload},
        occurred_at=now,
    )


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def _unlock(
    snapshot: ProgressSnapshot,
    catalog: Optional[AchievementCatalog],
    now: datetime,
) -> Tuple[ProgressSnapshot, Tuple[AchievementDefinition, ...], int, List[DomainEvent]]:
    """Unlock every qualifying achievement and add its reward."""
    unlocked = tuple(evaluate_achievements(snapshot, catalog=catalog))
    if not unlocked:
        return snapshot, (), 0, []

    reward = sum(definition.xp_reward for definition in unlocked)
    xp = snapshot.xp + reward
    updated = snapshot.with_changes(
        xp=xp,
        level=level_for_xp(xp),
        achievements=snapshot.achievements | {d.id for d in unlocked},
        badges=snapshot.badges + tuple(d.to_badge(now) for d in unlocked),
    )
    events = [
        _event(
            EVENT_ACHIEVEMENT_UNLOCKED,
            updated,
            now,
            achievement_id=definition.id,
            name=definition.name,
            description=definition.description,
            icon=definition.icon,
            xp_reward=definition.xp_reward,
        )
        for definition in unlocked
    ]
    return updated, unlocked, reward, events


def _level_event(
    snapshot: ProgressSnapshot, previous_level: int, now: datetime
) -> List[DomainEvent]:
    if snapshot.level <= previous_level:
        return []
    return [
        _event(
            EVENT_LEVELED_UP,
            snapshot,
            now,
            previous_level=previous_level,
            new_level=snapshot.level,
            xp=snapshot.xp,
        )
    ]


def _parse_day(value: Optional[DateLike]) -> Optional[date]:
    normalized = normalize_date(value)
    return date.fromisoformat(normalized) if normalized else None


# ============================================================================
# OPERATIONS
# ============================================================================


def award_xp(
    snapshot: ProgressSnapshot,
    amount: Any,
    *,
    reason: str = "",
    now: Optional[datetime] = None,
) -> ActivityResult:
    """
    Add raw XP (negative or unreadable amounts award nothing).

    Example:
        >>> result = award_xp(ProgressSnapshot.new("u1"), 120, reason="bonus")
        >>> (result.snapshot.xp, result.snapshot.level, result.leveled_up)
        (120, 2, True)
    """
    moment = _now(now)
    gained = clamp_non_negative(amount)
    previous_level = snapshot.level

    xp = snapshot.xp + gained
    updated = snapshot.with_changes(xp=xp, level=level_for_xp(xp))

    events: List[DomainEvent] = []
    if gained:
        events.append(
            _event(EVENT_XP_GAINED, updated, moment, amount=gained, reason=reason, total_xp=xp)
        )
    events.extend(_level_event(updated, previous_level, moment))

    return ActivityResult(
        snapshot=updated,
        xp_awarded=gained,
        newly_unlocked=(),
        previous_level=previous_level,
        events=tuple(events),
    )


def report_activity(
    kind: Union[ActivityKind, str],
    snapshot: ProgressSnapshot,
    *,
    catalog: Optional[AchievementCatalog] = None,
    now: Optional[datetime] = None,
) -> ActivityResult:
    """
    Apply one activity to a snapshot.

    Steps: bump the counter for `kind`, add its base XP, unlock qualifying
    achievements and add their rewards, recompute the level.

    Args:
        kind: Activity kind (enum member or its string value)
        snapshot: Current progress
        catalog: Catalog to evaluate (defaults to the process catalog)
        now: Timestamp for badges and events (defaults to current UTC time)

    Raises:
        ValidationError: If `kind` is not a known activity

    Example:
        >>> result = report_activity("submitted", ProgressSnapshot.new("u1"))
        >>> (result.snapshot.xp, result.snapshot.level, result.unlocked_ids)
        (150, 2, ['submit_1'])
    """
    activity = ActivityKind.parse(kind)
    moment = _now(now)
    previous_level = snapshot.level

    counter = ACTIVITY_COUNTER_FIELDS[activity.value]
    base_xp = ACTIVITY_XP_REWARDS[activity.value]
    xp = snapshot.xp + base_xp

    updated = snapshot.with_changes(
        **{counter: getattr(snapshot, counter) + 1},
        xp=xp,
        level=level_for_xp(xp),
    )
    events: List[DomainEvent] = [
        _event(
            EVENT_XP_GAINED,
            updated,
            moment,
            amount=base_xp,
            reason=ACTIVITY_XP_REASONS[activity.value],
            total_xp=xp,
            activity=activity.value,
        )
    ]

    updated, unlocked, reward, unlock_events = _unlock(updated, catalog, moment)
    events.extend(unlock_events)
    events.extend(_level_event(updated, previous_level, moment))

    return ActivityResult(
        snapshot=updated,
        xp_awarded=base_xp + reward,
        newly_unlocked=unlocked,
        previous_level=previous_level,
        events=tuple(events),
        kind=activity,
    )


def report_streak_checkpoint(
    snapshot: ProgressSnapshot,
    today: DateLike,
    last_visit_date: Optional[DateLike] = None,
    *,
    catalog: Optional[AchievementCatalog] = None,
    now: Optional[datetime] = None,
) -> StreakResult:
    """
    Count today's visit toward the daily streak.

    - last visit == today: nothing changes (already_counted)
    - last visit == yesterday: streak + 1
    - anything else: streak restarts at 1; streak_broken is set when a
      usable previous visit existed

    Streak achievements are evaluated afterwards and their XP applied.

    Args:
        snapshot: Current progress
        today: Calendar day of this visit (date or YYYY-MM-DD)
        last_visit_date: Previous visit day (defaults to snapshot.last_visit_date);
            empty or unreadable values count as no previous visit
        catalog: Catalog to evaluate (defaults to the process catalog)
        now: Timestamp for badges and events

    Raises:
        ValidationError: If `today` is not a readable date
    """
    current_day = _parse_day(today)
    if current_day is None:
        raise ValidationError("today", f"Not a calendar date: {today!r}")

    moment = _now(now)
    previous_level = snapshot.level
    last_day = _parse_day(
        snapshot.last_visit_date if last_visit_date is None else last_visit_date
    )

    if last_day == current_day:
        return StreakResult(
            snapshot=snapshot,
            streak_broken=False,
            already_counted=True,
            previous_level=previous_level,
        )

    previous_streak = snapshot.current_streak
    events: List[DomainEvent] = []
    broken = False

    if last_day is not None and last_day == current_day - timedelta(days=1):
        streak = previous_streak + 1
    else:
        streak = 1
        broken = last_day is not None

    updated = snapshot.with_changes(
        current_streak=streak,
        longest_streak=max(snapshot.longest_streak, streak),
        last_visit_date=current_day,
    )

    if broken:
        events.append(
            _event(
                EVENT_STREAK_BROKEN,
                updated,
                moment,
                previous_streak=previous_streak,
                last_visit_date=last_day.isoformat(),
            )
        )
    elif last_day is not None:
        events.append(
            _event(
                EVENT_STREAK_EXTENDED,
                updated,
                moment,
                streak=streak,
                previous_streak=previous_streak,
            )
        )
    if is_streak_milestone(streak):
        events.append(_event(EVENT_STREAK_MILESTONE, updated, moment, streak=streak))

    updated, unlocked, reward, unlock_events = _unlock(updated, catalog, moment)
    if reward:
        events.append(
            _event(
                EVENT_XP_GAINED,
                updated,
                moment,
                amount=reward,
                reason="streak achievements",
                total_xp=updated.xp,
            )
        )
    events.extend(unlock_events)
    events.extend(_level_event(updated, previous_level, moment))

    return StreakResult(
        snapshot=updated,
        streak_broken=broken,
        already_counted=False,
        newly_unlocked=unlocked,
        xp_awarded=reward,
        previous_level=previous_level,
        events=tuple(events),
    )
