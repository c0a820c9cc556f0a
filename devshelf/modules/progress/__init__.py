"""
Progress Module
===============

Progress and achievement engine for DevShelf: level arithmetic, the
achievement catalog, the evaluator and the aggregator, plus the async
ProgressService that wires them to storage, the activity log and the event
bus.

Engine operations (pure, synchronous)
-------------------------------------
- level_for_xp / xp_threshold_for_level / progress_fraction
- evaluate_achievements
- report_activity / report_streak_checkpoint
"""

from devshelf.modules.shared.formulas import (
    level_for_xp,
    progress_fraction,
    xp_for_level_start,
    xp_threshold_for_level,
    xp_to_next_level,
)

from .aggregator import (
    ActivityResult,
    StreakResult,
    award_xp,
    report_activity,
    report_streak_checkpoint,
)
from .catalog import ACHIEVEMENTS, DEFAULT_CATALOG, AchievementCatalog, get_catalog
from .evaluator import (
    AchievementProgress,
    achievement_progress,
    evaluate_achievements,
    next_achievements,
)
from .messages import (
    NotificationKind,
    NotificationMessage,
    ProgressNotificationListener,
    build_notification,
)
from .ports import ActivityLog, NotificationSink, ProgressRepository
from .service import ProgressService, ProgressSummary

__all__ = [
    "level_for_xp",
    "xp_threshold_for_level",
    "xp_for_level_start",
    "xp_to_next_level",
    "progress_fraction",
    "evaluate_achievements",
    "achievement_progress",
    "next_achievements",
    "AchievementProgress",
    "report_activity",
    "report_streak_checkpoint",
    "award_xp",
    "ActivityResult",
    "StreakResult",
    "ACHIEVEMENTS",
    "DEFAULT_CATALOG",
    "AchievementCatalog",
    "get_catalog",
    "NotificationKind",
    "NotificationMessage",
    "ProgressNotificationListener",
    "build_notification",
    "ActivityLog",
    "NotificationSink",
    "ProgressRepository",
    "ProgressService",
    "ProgressSummary",
]
