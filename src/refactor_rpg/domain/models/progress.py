"""
Player progress read models.

PlayerProgress and CategoryStats are derived snapshots: they are recomputed
from `(total_xp, action_history)` by the ProgressionEngine and handed to UI,
notification and export collaborators. They are never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from .refactoring import ActionCategory, DetectedAction, RefactoringKind


class LevelTier(Enum):
    """Cosmetic tier shown next to the player's title."""

    APPRENTICE = ("Apprentice", "🌱")
    REFACTORER = ("Refactorer", "⚔️")
    EXPERT = ("Expert", "🛡️")
    MASTER = ("Master", "🎖️")
    GRAND_MASTER = ("Grand Master", "👑")
    LEGEND = ("Legend", "🧙")

    def __init__(self, display_name: str, emoji: str) -> None:
        self.display_name = display_name
        self.emoji = emoji


@dataclass(frozen=True, slots=True)
class CategoryStats:
    category: ActionCategory
    action_count: int = 0
    total_xp: int = 0
    most_frequent_kind: Optional[RefactoringKind] = None

    @property
    def average_xp(self) -> float:
        if self.action_count == 0:
            return 0.0
        return self.total_xp / self.action_count


@dataclass(frozen=True, slots=True)
class PlayerProgress:
    """
    Snapshot of a player's progression.

    Attributes
    ----------
    total_xp : int
        Monotonic XP total (actions + quest rewards)
    level : int
        Largest level whose threshold is <= total_xp
    current_level_xp : int
        XP earned since reaching `level`
    xp_for_next_level : int
        Absolute XP threshold of `level + 1`
    level_progress : float
        Fraction of the way from `level` to `level + 1`, in [0, 1]
    """

    total_xp: int
    level: int
    current_level_xp: int
    xp_for_next_level: int
    level_progress: float
    title: str
    tier: LevelTier
    category_stats: Mapping[ActionCategory, CategoryStats]
    action_count: int
    last_action_at: Optional[datetime]
    recent_actions: tuple[DetectedAction, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.category_stats, MappingProxyType):
            object.__setattr__(
                self, "category_stats", MappingProxyType(dict(self.category_stats))
            )

    @property
    def xp_to_next_level(self) -> int:
        return max(0, self.xp_for_next_level - self.total_xp)

    def stats_for(self, category: ActionCategory) -> CategoryStats:
        return self.category_stats.get(category, CategoryStats(category))

    def to_dict(self) -> dict:
        """Primitive rendering for export collaborators (JSON/CSV/Markdown)."""
        return {
            "total_xp": self.total_xp,
            "level": self.level,
            "title": self.title,
            "tier": self.tier.display_name,
            "current_level_xp": self.current_level_xp,
            "xp_for_next_level": self.xp_for_next_level,
            "level_progress": round(self.level_progress, 4),
            "action_count": self.action_count,
            "last_action_at": self.last_action_at.isoformat() if self.last_action_at else None,
            "categories": {
                category.name: {
                    "display_name": category.display_name,
                    "action_count": stats.action_count,
                    "total_xp": stats.total_xp,
                    "average_xp": round(stats.average_xp, 2),
                    "most_frequent_kind": (
                        stats.most_frequent_kind.name if stats.most_frequent_kind else None
                    ),
                }
                for category, stats in self.category_stats.items()
            },
        }
