"""
DevShelf Progress Formulas

Purpose
-------
Pure calculation functions for the progression system: the level curve, the
XP bounds of a level, the progress bar fraction, and the streak celebration
rule.

Compliance
----------
- Pure functions only (no side effects)
- No infrastructure dependencies
- No config access (all parameters passed in)
- Deterministic and testable

Design Notes
------------
Inputs are externally persisted numbers that may have drifted, so every
function clamps instead of raising: negative, non-finite or unparsable XP is
zero, a level below 1 is 1.

The level curve and the "start of level" curve are not exact inverses:
`level_for_xp` places 0-99 XP at level 1, while `xp_for_level_start(1)` is
100. A level-1 user below 100 XP therefore shows 0% progress until they reach
100 XP. This matches the behaviour users already see and is kept as is.

Usage
-----
    from devshelf.modules.shared.formulas import level_for_xp, progress_fraction

    level = level_for_xp(450)              # 3
    percent = progress_fraction(450, level)
"""

from __future__ import annotations

import math
from typing import Any

from .constants import (
    LEVEL_XP_BASE,
    STREAK_MILESTONE_INTERVAL,
    STREAK_MILESTONES,
)


def clamp_non_negative(value: Any) -> int:
    """
    Coerce an externally supplied number to a non-negative integer.

    None, NaN, infinities, negatives and anything that cannot be read as a
    number become 0. Floats are floored. Booleans are not numbers here.

    Example:
        >>> clamp_non_negative(-5)
        0
        >>> clamp_non_negative(12.9)
        12
        >>> clamp_non_negative("40")
        40
        >>> clamp_non_negative(float("nan"))
        0
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, int):
        return value if value > 0 else 0

    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0

    if not math.isfinite(number) or number <= 0:
        return 0
    return int(math.floor(number))


def clamp_level(level: Any) -> int:
    """Coerce a stored level to a positive integer (minimum 1)."""
    return max(1, clamp_non_negative(level))


def level_for_xp(xp: Any) -> int:
    """
    Calculate the level for a total XP amount.

    Formula: floor(sqrt(xp / 100)) + 1

    Args:
        xp: Total XP accumulated

    Returns:
        Level (minimum 1)

    Example:
        >>> level_for_xp(0)
        1
        >>> level_for_xp(99)
        1
        >>> level_for_xp(100)
        2
        >>> level_for_xp(400)
        3
    """
    total = clamp_non_negative(xp)
    # isqrt(total // base) == floor(sqrt(total / base)) for integer totals
    return math.isqrt(total // LEVEL_XP_BASE) + 1


def xp_for_level_start(level: Any) -> int:
    """
    XP value treated as the start of `level` on the progress bar.

    Formula: level^2 * 100

    Example:
        >>> xp_for_level_start(1)
        100
        >>> xp_for_level_start(3)
        900
    """
    current = clamp_level(level)
    return current * current * LEVEL_XP_BASE


def xp_threshold_for_level(level: Any) -> int:
    """
    XP required to complete `level` and reach `level + 1`.

    Formula: (level + 1)^2 * 100

    Example:
        >>> xp_threshold_for_level(1)
        400
        >>> xp_threshold_for_level(2)
        900
    """
    following = clamp_level(level) + 1
    return following * following * LEVEL_XP_BASE


def progress_fraction(xp: Any, level: Any) -> float:
    """
    Percentage of the way from the start of `level` to the next threshold.

    Linear between xp_for_level_start(level) (0.0) and
    xp_threshold_for_level(level) (100.0), clamped to [0, 100] so a stored
    level that disagrees with the stored XP still renders a sane bar.

    Example:
        >>> progress_fraction(100, 1)
        0.0
        >>> progress_fraction(250, 1)
        50.0
        >>> progress_fraction(400, 1)
        100.0
    """
    total = clamp_non_negative(xp)
    start = xp_for_level_start(level)
    end = xp_threshold_for_level(level)

    percent = (total - start) / (end - start) * 100.0
    return max(0.0, min(100.0, percent))


def xp_to_next_level(xp: Any, level: Any) -> int:
    """
    XP still missing before the next-level threshold (never negative).

    Example:
        >>> xp_to_next_level(150, 2)
        750
    """
    return max(0, xp_threshold_for_level(level) - clamp_non_negative(xp))


def is_streak_milestone(streak: Any) -> bool:
    """
    Whether a streak length deserves a celebration.

    Milestones are 3 and 7 days, then every multiple of 10.

    Example:
        >>> [s for s in range(1, 31) if is_streak_milestone(s)]
        [3, 7, 10, 20, 30]
    """
    days = clamp_non_negative(streak)
    if days in STREAK_MILESTONES:
        return True
    return days >= STREAK_MILESTONE_INTERVAL and days % STREAK_MILESTONE_INTERVAL == 0
