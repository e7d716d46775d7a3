"""
Unit tests for Quest and QuestObjective domain models.

Tests construction invariants, lifecycle transitions and XP award math.
"""

from datetime import datetime, timedelta, timezone

import pytest

from refactor_rpg.domain.models.base import DomainValidationError
from refactor_rpg.domain.models.quest import (
    Quest,
    QuestCategory,
    QuestDifficulty,
    QuestObjective,
    QuestStatus,
    round_half_up,
)

NOW = datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)


def build_quest(*objectives: QuestObjective, **overrides) -> Quest:
    fields = dict(
        id="extract-five",
        title="Extract 5 methods",
        description="Extract five methods",
        category=QuestCategory.REFACTORING,
        base_xp_reward=200,
        difficulty=QuestDifficulty.MEDIUM,
        objectives=objectives or (QuestObjective("Extract Method × 5", 5, "kind:EXTRACT_METHOD"),),
        created_at=NOW,
    )
    fields.update(overrides)
    return Quest(**fields)


@pytest.mark.unit
@pytest.mark.domain
class TestQuestObjective:
    """Test objective counters."""

    def test_advanced_increments(self):
        objective = QuestObjective("Rename × 2", 2, "kind:RENAME")

        assert objective.advanced().current_count == 1
        assert objective.current_count == 0  # Unchanged

    def test_advanced_saturates_at_target(self):
        # Arrange
        objective = QuestObjective("Rename × 2", 2, "kind:RENAME", current_count=2)

        # Act
        advanced = objective.advanced()

        # Assert
        assert advanced.current_count == 2
        assert advanced.is_completed

    def test_progress_fraction(self):
        objective = QuestObjective("Rename × 4", 4, "kind:RENAME", current_count=1)
        assert objective.progress == 0.25

    @pytest.mark.parametrize("target", [0, -1])
    def test_non_positive_target_rejected(self, target):
        with pytest.raises(DomainValidationError):
            QuestObjective("Broken", target, "any")

    def test_empty_match_rejected(self):
        with pytest.raises(DomainValidationError):
            QuestObjective("Broken", 1, "")


@pytest.mark.unit
@pytest.mark.domain
class TestQuestInvariants:
    """Test invariants enforced at construction."""

    def test_zero_objectives_rejected(self):
        with pytest.raises(DomainValidationError) as exc_info:
            Quest(
                id="empty",
                title="Empty",
                description="",
                category=QuestCategory.DAILY,
                base_xp_reward=10,
                difficulty=QuestDifficulty.EASY,
                objectives=(),
            )

        assert exc_info.value.field == "objectives"

    def test_negative_reward_rejected(self):
        with pytest.raises(DomainValidationError):
            build_quest(base_xp_reward=-1)

    def test_completed_requires_completed_at(self):
        done = QuestObjective("Rename × 1", 1, "kind:RENAME", current_count=1)
        with pytest.raises(DomainValidationError):
            build_quest(done, status=QuestStatus.COMPLETED)

    def test_completed_at_requires_completed_status(self):
        done = QuestObjective("Rename × 1", 1, "kind:RENAME", current_count=1)
        with pytest.raises(DomainValidationError):
            build_quest(done, status=QuestStatus.IN_PROGRESS, completed_at=NOW)

    def test_completed_requires_all_objectives(self):
        partial = QuestObjective("Rename × 2", 2, "kind:RENAME", current_count=1)
        with pytest.raises(DomainValidationError):
            build_quest(partial, status=QuestStatus.COMPLETED, completed_at=NOW)

    def test_available_cannot_have_progress(self):
        partial = QuestObjective("Rename × 2", 2, "kind:RENAME", current_count=1)
        with pytest.raises(DomainValidationError):
            build_quest(partial)

    def test_list_objectives_coerced_to_tuple(self):
        quest = build_quest(objectives=[QuestObjective("Rename × 1", 1, "kind:RENAME")])
        assert isinstance(quest.objectives, tuple)


@pytest.mark.unit
@pytest.mark.domain
class TestQuestTransitions:
    """Test the AVAILABLE -> IN_PROGRESS -> COMPLETED lifecycle."""

    def test_first_progress_moves_to_in_progress(self):
        # Arrange
        quest = build_quest()

        # Act
        updated = quest.with_objectives((quest.objectives[0].advanced(),), NOW)

        # Assert
        assert updated.status is QuestStatus.IN_PROGRESS
        assert updated.completed_at is None
        assert quest.status is QuestStatus.AVAILABLE

    def test_all_objectives_complete_the_quest(self):
        # Arrange
        quest = build_quest(QuestObjective("Rename × 1", 1, "kind:RENAME"))
        later = NOW + timedelta(minutes=5)

        # Act
        updated = quest.with_objectives((quest.objectives[0].advanced(),), later)

        # Assert
        assert updated.status is QuestStatus.COMPLETED
        assert updated.completed_at == later
        assert updated.progress == 1.0

    def test_partial_completion_progress(self):
        quest = build_quest(
            QuestObjective("Rename × 1", 1, "kind:RENAME"),
            QuestObjective("Extract Method × 1", 1, "kind:EXTRACT_METHOD"),
        )

        updated = quest.with_objectives(
            (quest.objectives[0].advanced(), quest.objectives[1]), NOW
        )

        assert updated.progress == 0.5
        assert updated.status is QuestStatus.IN_PROGRESS

    def test_completed_quest_is_terminal(self):
        quest = build_quest(QuestObjective("Rename × 1", 1, "kind:RENAME"))
        completed = quest.with_objectives((quest.objectives[0].advanced(),), NOW)

        with pytest.raises(DomainValidationError):
            completed.with_objectives(completed.objectives, NOW)

    def test_counters_cannot_decrease(self):
        quest = build_quest()
        advanced = quest.with_objectives((quest.objectives[0].advanced(),), NOW)

        with pytest.raises(DomainValidationError):
            advanced.with_objectives(quest.objectives, NOW)


@pytest.mark.unit
@pytest.mark.domain
class TestQuestRewards:
    @pytest.mark.parametrize(
        "difficulty, base, expected",
        [
            (QuestDifficulty.EASY, 100, 100),
            (QuestDifficulty.MEDIUM, 200, 300),
            (QuestDifficulty.MEDIUM, 75, 113),  # 112.5 rounds up
            (QuestDifficulty.HARD, 500, 1000),
            (QuestDifficulty.EXPERT, 400, 1200),
        ],
    )
    def test_xp_award(self, difficulty, base, expected):
        quest = build_quest(difficulty=difficulty, base_xp_reward=base)
        assert quest.xp_award == expected

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2

    def test_multipliers_at_least_one(self):
        assert all(difficulty.xp_multiplier >= 1.0 for difficulty in QuestDifficulty)
