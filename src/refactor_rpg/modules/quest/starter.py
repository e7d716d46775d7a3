"""
Starter quest set.

Seeded whenever a profile has no quest snapshot (first run, reset, or an
empty/unreadable record). Covers every quest category; ids are stable so
persisted progress keeps pointing at the same quest across releases.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from refactor_rpg.domain.models.base import utc_now
from refactor_rpg.domain.models.quest import (
    Quest,
    QuestCategory,
    QuestDifficulty,
    QuestObjective,
)
from refactor_rpg.domain.models.refactoring import ActionCategory, RefactoringKind

from .objectives import MATCH_ANY, category_key, kind_key


def _kind_objective(kind: RefactoringKind, target: int) -> QuestObjective:
    return QuestObjective(f"{kind.display_name} × {target}", target, kind_key(kind))


def starter_quests(now: Optional[datetime] = None) -> tuple[Quest, ...]:
    """Build a fresh, AVAILABLE copy of the starter quests."""
    created = now or utc_now()
    return (
        Quest(
            id="first-steps",
            title="First Steps",
            description="Perform your first 5 refactorings",
            category=QuestCategory.REFACTORING,
            base_xp_reward=100,
            difficulty=QuestDifficulty.EASY,
            objectives=(QuestObjective("Perform 5 refactorings", 5, MATCH_ANY),),
            created_at=created,
        ),
        Quest(
            id="rename-master",
            title="Rename Master",
            description="Give 10 elements a better name",
            category=QuestCategory.REFACTORING,
            base_xp_reward=150,
            difficulty=QuestDifficulty.EASY,
            objectives=(_kind_objective(RefactoringKind.RENAME, 10),),
            created_at=created,
        ),
        Quest(
            id="extract-expert",
            title="Extract Expert",
            description="Extract 5 methods",
            category=QuestCategory.REFACTORING,
            base_xp_reward=200,
            difficulty=QuestDifficulty.MEDIUM,
            objectives=(_kind_objective(RefactoringKind.EXTRACT_METHOD, 5),),
            created_at=created,
        ),
        Quest(
            id="spring-cleaning",
            title="Spring Cleaning",
            description="Tidy imports and formatting across the codebase",
            category=QuestCategory.CLEANUP,
            base_xp_reward=250,
            difficulty=QuestDifficulty.MEDIUM,
            objectives=(
                _kind_objective(RefactoringKind.OPTIMIZE_IMPORTS, 10),
                _kind_objective(RefactoringKind.REFORMAT_CODE, 10),
            ),
            created_at=created,
        ),
        Quest(
            id="budding-architect",
            title="Budding Architect",
            description="Split responsibilities into new classes and move behavior home",
            category=QuestCategory.DESIGN,
            base_xp_reward=500,
            difficulty=QuestDifficulty.HARD,
            objectives=(
                _kind_objective(RefactoringKind.EXTRACT_CLASS, 3),
                _kind_objective(RefactoringKind.MOVE_METHOD, 5),
            ),
            created_at=created,
        ),
        Quest(
            id="testable-seams",
            title="Testable Seams",
            description="Introduce interfaces and encapsulate fields to make code testable",
            category=QuestCategory.TESTING,
            base_xp_reward=300,
            difficulty=QuestDifficulty.MEDIUM,
            objectives=(
                _kind_objective(RefactoringKind.INTRODUCE_INTERFACE, 2),
                _kind_objective(RefactoringKind.ENCAPSULATE_FIELD, 3),
            ),
            created_at=created,
        ),
        Quest(
            id="daily-logic-drill",
            title="Daily Logic Drill",
            description="Simplify 3 pieces of logic",
            category=QuestCategory.DAILY,
            base_xp_reward=75,
            difficulty=QuestDifficulty.EASY,
            objectives=(
                QuestObjective(
                    f"{ActionCategory.LOGIC.display_name} refactorings × 3",
                    3,
                    category_key(ActionCategory.LOGIC),
                ),
            ),
            created_at=created,
        ),
        Quest(
            id="decoupler",
            title="Decoupler",
            description="Break a dependency cycle and invert two dependencies",
            category=QuestCategory.DESIGN,
            base_xp_reward=400,
            difficulty=QuestDifficulty.EXPERT,
            objectives=(
                _kind_objective(RefactoringKind.BREAK_CYCLIC_DEPENDENCY, 1),
                _kind_objective(RefactoringKind.DEPENDENCY_INVERSION, 2),
            ),
            created_at=created,
        ),
    )


STARTER_QUEST_IDS = (
    "first-steps",
    "rename-master",
    "extract-expert",
    "spring-cleaning",
    "budding-architect",
    "testable-seams",
    "daily-logic-drill",
    "decoupler",
)
