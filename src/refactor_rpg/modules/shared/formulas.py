"""
RefactorRPG Progression Formulas

Purpose
-------
Pure calculation functions for progression: the level threshold curve, its
inverse, titles and tiers.

Design Notes
------------
- Pure functions only (no side effects, no config access; curve parameters
  are passed in by the ProgressionEngine).
- The threshold curve is `floor(base * level ** exponent)` for level >= 2 and
  0 for level <= 1. It is strictly increasing from level 2 on.
- `level_for_xp` scans upward from level 1 instead of inverting the curve:
  a closed-form inverse drifts at threshold boundaries because of the floor.

Usage
-----
    from refactor_rpg.modules.shared.formulas import level_for_xp, xp_threshold

    xp_threshold(2)       # 282
    level_for_xp(282)     # 2
"""

from __future__ import annotations

import math

from refactor_rpg.domain.models.progress import LevelTier

DEFAULT_XP_BASE = 100
DEFAULT_XP_EXPONENT = 1.5


def xp_threshold(
    level: int,
    base: float = DEFAULT_XP_BASE,
    exponent: float = DEFAULT_XP_EXPONENT,
) -> int:
    """
    Cumulative XP required to reach `level`.

    Args:
        level: Target level
        base: Curve base (default 100)
        exponent: Curve exponent (default 1.5)

    Returns:
        0 for level <= 1, otherwise floor(base * level ** exponent)

    Example:
        >>> xp_threshold(1)
        0
        >>> xp_threshold(2)
        282
        >>> xp_threshold(10)
        3162
    """
    if level <= 1:
        return 0
    return math.floor(base * (level**exponent))


def level_for_xp(
    total_xp: int,
    base: float = DEFAULT_XP_BASE,
    exponent: float = DEFAULT_XP_EXPONENT,
) -> int:
    """
    Largest level whose threshold does not exceed `total_xp`.

    Args:
        total_xp: Cumulative XP (non-negative)
        base: Curve base
        exponent: Curve exponent

    Returns:
        Level >= 1

    Raises:
        ValueError: If total_xp is negative

    Example:
        >>> level_for_xp(0)
        1
        >>> level_for_xp(281)
        1
        >>> level_for_xp(282)
        2
    """
    if total_xp < 0:
        raise ValueError(f"total_xp must be non-negative, got {total_xp}")

    # Closed-form estimate, then step to the exact level.
    level = max(1, int((total_xp / base) ** (1.0 / exponent)))
    while level > 1 and xp_threshold(level, base, exponent) > total_xp:
        level -= 1
    while xp_threshold(level + 1, base, exponent) <= total_xp:
        level += 1
    return level


def level_progress(
    total_xp: int,
    level: int,
    base: float = DEFAULT_XP_BASE,
    exponent: float = DEFAULT_XP_EXPONENT,
) -> float:
    """
    Fraction of the way from `level` to `level + 1`, clamped to [0, 1].

    Example:
        >>> level_progress(141, 1)
        0.5
    """
    current = xp_threshold(level, base, exponent)
    span = xp_threshold(level + 1, base, exponent) - current
    if span <= 0:
        return 1.0
    return min(1.0, max(0.0, (total_xp - current) / span))


def title_for_level(level: int) -> str:
    """
    Player title for a level.

    Example:
        >>> title_for_level(1)
        'Refactoring Apprentice'
        >>> title_for_level(50)
        'Grand Master'
    """
    if level < 5:
        return "Refactoring Apprentice"
    if level < 10:
        return "Refactorer"
    if level < 20:
        return "Expert Refactorer"
    if level < 30:
        return "Refactoring Master"
    if level <= 50:
        return "Grand Master"
    return "Living Legend"


def tier_for_level(level: int) -> LevelTier:
    """Cosmetic tier; boundaries match `title_for_level`."""
    if level < 5:
        return LevelTier.APPRENTICE
    if level < 10:
        return LevelTier.REFACTORER
    if level < 20:
        return LevelTier.EXPERT
    if level < 30:
        return LevelTier.MASTER
    if level <= 50:
        return LevelTier.GRAND_MASTER
    return LevelTier.LEGEND
