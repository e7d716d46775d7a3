"""
Domain models package for RefactorRPG.

Immutable value objects for the refactoring taxonomy, detected actions,
quests and progress snapshots. No I/O, no logging, no configuration.
"""

from .base import (
    DomainValidationError,
    from_epoch_millis,
    to_epoch_millis,
    utc_now,
    validate_non_negative,
    validate_not_empty,
    validate_positive,
)
from .progress import CategoryStats, LevelTier, PlayerProgress
from .quest import (
    Quest,
    QuestCategory,
    QuestDifficulty,
    QuestObjective,
    QuestStatus,
)
from .refactoring import (
    ELEMENT_HINT_MAX_LENGTH,
    ActionCategory,
    DetectedAction,
    RefactoringKind,
)

__all__ = [
    "DomainValidationError",
    "from_epoch_millis",
    "to_epoch_millis",
    "utc_now",
    "validate_non_negative",
    "validate_not_empty",
    "validate_positive",
    "ActionCategory",
    "DetectedAction",
    "ELEMENT_HINT_MAX_LENGTH",
    "RefactoringKind",
    "CategoryStats",
    "LevelTier",
    "PlayerProgress",
    "Quest",
    "QuestCategory",
    "QuestDifficulty",
    "QuestObjective",
    "QuestStatus",
]
