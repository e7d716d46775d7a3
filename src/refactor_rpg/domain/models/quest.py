"""
Quest domain models.

Purpose
-------
Immutable quests and objectives plus the lifecycle rules that govern them:

    AVAILABLE --(first matching action)--> IN_PROGRESS
              --(every objective met)--> COMPLETED (terminal)

Responsibilities
----------------
- Enforce quest invariants at construction time:
  * at least one objective
  * status COMPLETED <=> completed_at set <=> all objectives complete
- Provide transition methods that return new instances.
- Compute the completion XP award.

Non-Responsibilities
--------------------
- Deciding which objectives an action matches (QuestEngine + objective table)
- Storing quests (QuestEngine registries)

Design Notes
------------
A quest with zero objectives is rejected outright: "all objectives complete"
would be vacuously true and the quest would complete on its own.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from .base import (
    DomainValidationError,
    utc_now,
    validate_non_negative,
    validate_not_empty,
    validate_positive,
)


class QuestStatus(Enum):
    AVAILABLE = "available"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class QuestCategory(Enum):
    REFACTORING = ("Refactoring", "♻️")
    TESTING = ("Testing", "🧪")
    CLEANUP = ("Cleanup", "🧹")
    DESIGN = ("Architecture", "🏗️")
    DAILY = ("Daily", "📅")

    def __init__(self, display_name: str, icon: str) -> None:
        self.display_name = display_name
        self.icon = icon


class QuestDifficulty(Enum):
    """Difficulty tiers; the multiplier scales the quest's base XP reward."""

    EASY = ("Easy", "⭐", 1.0)
    MEDIUM = ("Medium", "⭐⭐", 1.5)
    HARD = ("Hard", "⭐⭐⭐", 2.0)
    EXPERT = ("Expert", "⭐⭐⭐⭐", 3.0)

    def __init__(self, display_name: str, icon: str, xp_multiplier: float) -> None:
        self.display_name = display_name
        self.icon = icon
        self.xp_multiplier = xp_multiplier


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True, slots=True)
class QuestObjective:
    """
    One countable sub-goal of a quest.

    `match` names the entry in the objective matcher table that decides which
    actions count toward this objective (e.g. "any", "kind:RENAME").
    """

    description: str
    target_count: int
    match: str
    current_count: int = 0

    def __post_init__(self) -> None:
        validate_not_empty(self.description, "description")
        validate_not_empty(self.match, "match")
        validate_positive(self.target_count, "target_count")
        validate_non_negative(self.current_count, "current_count")

    @property
    def is_completed(self) -> bool:
        return self.current_count >= self.target_count

    @property
    def progress(self) -> float:
        return min(1.0, self.current_count / self.target_count)

    def advanced(self) -> "QuestObjective":
        """Count one matching action. Saturates at the target."""
        if self.is_completed:
            return self
        return replace(self, current_count=self.current_count + 1)


@dataclass(frozen=True, slots=True)
class Quest:
    """
    A quest: ordered objectives, a base reward and a lifecycle status.

    Examples
    --------
    >>> quest = Quest(
    ...     id="extract-expert",
    ...     title="Extract Expert",
    ...     description="Extract 5 methods",
    ...     category=QuestCategory.REFACTORING,
    ...     base_xp_reward=200,
    ...     difficulty=QuestDifficulty.MEDIUM,
    ...     objectives=(QuestObjective("Extract Method × 5", 5, "kind:EXTRACT_METHOD"),),
    ... )
    >>> quest.xp_award
    300
    """

    id: str
    title: str
    description: str
    category: QuestCategory
    base_xp_reward: int
    difficulty: QuestDifficulty
    objectives: tuple[QuestObjective, ...]
    status: QuestStatus = QuestStatus.AVAILABLE
    created_at: datetime = field(default_factory=utc_now)
    completed_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        validate_not_empty(self.id, "id")
        validate_not_empty(self.title, "title")
        validate_non_negative(self.base_xp_reward, "base_xp_reward")

        if not isinstance(self.objectives, tuple):
            object.__setattr__(self, "objectives", tuple(self.objectives))
        if not self.objectives:
            raise DomainValidationError(
                f"Quest '{self.id}' must have at least one objective",
                field="objectives",
            )

        all_done = all(obj.is_completed for obj in self.objectives)
        is_completed = self.status is QuestStatus.COMPLETED
        if is_completed != (self.completed_at is not None) or is_completed != all_done:
            raise DomainValidationError(
                f"Quest '{self.id}' has inconsistent completion state "
                f"(status={self.status.name}, completed_at={self.completed_at}, "
                f"objectives_done={all_done})",
                field="status",
            )

        if self.status is QuestStatus.AVAILABLE and any(
            obj.current_count > 0 for obj in self.objectives
        ):
            raise DomainValidationError(
                f"Quest '{self.id}' is AVAILABLE but has progress",
                field="status",
            )

    # ------------------------------------------------------------------ #
    # Derived state
    # ------------------------------------------------------------------ #

    @property
    def is_completed(self) -> bool:
        return self.status is QuestStatus.COMPLETED

    @property
    def is_active(self) -> bool:
        return self.status is not QuestStatus.COMPLETED

    @property
    def progress(self) -> float:
        """Fraction of objectives completed."""
        done = sum(1 for obj in self.objectives if obj.is_completed)
        return done / len(self.objectives)

    @property
    def xp_award(self) -> int:
        """Base reward times difficulty multiplier, rounded half up."""
        return round_half_up(self.base_xp_reward * self.difficulty.xp_multiplier)

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #

    def with_objectives(
        self,
        objectives: tuple[QuestObjective, ...],
        now: datetime,
    ) -> "Quest":
        """
        Return a copy with updated objectives and the recomputed status.

        Raises
        ------
        DomainValidationError
            If the quest is already completed, or a counter would decrease.
        """
        if self.is_completed:
            raise DomainValidationError(
                f"Quest '{self.id}' is completed and cannot change", field="status"
            )
        if len(objectives) != len(self.objectives) or any(
            new.current_count < old.current_count
            for new, old in zip(objectives, self.objectives)
        ):
            raise DomainValidationError(
                f"Quest '{self.id}' objective counters cannot decrease", field="objectives"
            )

        if all(obj.is_completed for obj in objectives):
            return replace(
                self,
                objectives=objectives,
                status=QuestStatus.COMPLETED,
                completed_at=now,
            )

        status = self.status
        if status is QuestStatus.AVAILABLE and any(obj.current_count > 0 for obj in objectives):
            status = QuestStatus.IN_PROGRESS
        return replace(self, objectives=objectives, status=status)
