"""
Unit tests for ProgressionEngine.

Tests XP accumulation, level derivation, category aggregation and the
PlayerProgress read model.
"""

from datetime import datetime, timedelta, timezone

import pytest

from refactor_rpg.domain.models.refactoring import ActionCategory, DetectedAction, RefactoringKind
from refactor_rpg.modules.progression.service import aggregate
from refactor_rpg.modules.shared.exceptions import ValidationError

NOW = datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)


@pytest.mark.unit
@pytest.mark.service
class TestXpAccumulation:
    """Test add_action and award_quest_xp."""

    def test_fresh_engine(self, progression):
        progress = progression.snapshot()

        assert progress.total_xp == 0
        assert progress.level == 1
        assert progress.xp_for_next_level == 282
        assert progress.title == "Refactoring Apprentice"
        assert progress.last_action_at is None

    def test_add_action_adds_base_xp(self, progression, make_action):
        # Act
        change = progression.add_action(make_action(RefactoringKind.EXTRACT_METHOD))

        # Assert
        assert change.amount == 10
        assert change.old_total == 0
        assert change.new_total == 10
        assert not change.leveled_up
        assert progression.total_xp == 10
        assert progression.action_count == 1

    def test_level_up_detected(self, progression):
        # Arrange
        progression.award_quest_xp(280)

        # Act
        change = progression.add_action(
            DetectedAction(RefactoringKind.BREAK_CYCLIC_DEPENDENCY, NOW)
        )

        # Assert
        assert change.leveled_up
        assert (change.old_level, change.new_level) == (1, 2)

    def test_quest_xp_does_not_touch_history(self, progression):
        progression.award_quest_xp(150, quest_id="rename-master")

        assert progression.total_xp == 150
        assert progression.history == ()

    def test_negative_quest_xp_rejected(self, progression):
        with pytest.raises(ValidationError):
            progression.award_quest_xp(-5)

        assert progression.total_xp == 0

    def test_level_uses_configured_curve(self, progression, config_manager):
        config_manager.set("progression.xp_curve.base", 10)

        progression.award_quest_xp(29)

        assert progression.level == 2  # floor(10 * 2 ** 1.5) == 28

    def test_reset(self, progression, make_action):
        progression.add_action(make_action())
        progression.award_quest_xp(100)

        progression.reset()

        assert progression.total_xp == 0
        assert progression.action_count == 0


@pytest.mark.unit
@pytest.mark.service
class TestAggregation:
    """Test per-category rollups."""

    def test_empty_history_has_every_category(self):
        stats = aggregate([])

        assert set(stats) == set(ActionCategory)
        assert all(s.action_count == 0 and s.most_frequent_kind is None for s in stats.values())

    def test_counts_and_xp_per_category(self, make_action):
        # Arrange
        history = [
            make_action(RefactoringKind.EXTRACT_METHOD),
            make_action(RefactoringKind.RENAME),
            make_action(RefactoringKind.RENAME),
            make_action(RefactoringKind.SIMPLIFY_BOOLEAN),
        ]

        # Act
        stats = aggregate(history)

        # Assert
        structure = stats[ActionCategory.STRUCTURE]
        assert structure.action_count == 3
        assert structure.total_xp == 20
        assert structure.most_frequent_kind is RefactoringKind.RENAME
        assert structure.average_xp == pytest.approx(20 / 3)
        assert stats[ActionCategory.LOGIC].most_frequent_kind is RefactoringKind.SIMPLIFY_BOOLEAN
        assert stats[ActionCategory.DATA].action_count == 0

    def test_tie_goes_to_first_encountered(self, make_action):
        history = [
            make_action(RefactoringKind.RENAME),
            make_action(RefactoringKind.EXTRACT_METHOD),
            make_action(RefactoringKind.EXTRACT_METHOD),
            make_action(RefactoringKind.RENAME),
        ]

        stats = aggregate(history)

        assert stats[ActionCategory.STRUCTURE].most_frequent_kind is RefactoringKind.RENAME


@pytest.mark.unit
@pytest.mark.service
class TestPlayerProgressSnapshot:
    """Test the derived read model."""

    def test_snapshot_fields(self, progression):
        # Arrange
        for offset in range(3):
            progression.add_action(
                DetectedAction(RefactoringKind.RENAME, NOW + timedelta(seconds=offset))
            )

        # Act
        progress = progression.snapshot()

        # Assert
        assert progress.total_xp == 15
        assert progress.current_level_xp == 15
        assert progress.level_progress == pytest.approx(15 / 282)
        assert progress.action_count == 3
        assert progress.last_action_at == NOW + timedelta(seconds=2)
        assert progress.xp_to_next_level == 267
        assert progress.stats_for(ActionCategory.STRUCTURE).action_count == 3

    def test_recent_actions_newest_first(self, progression):
        for offset in range(5):
            progression.add_action(
                DetectedAction(RefactoringKind.RENAME, NOW + timedelta(seconds=offset))
            )

        recent = progression.recent_actions(2)

        assert [a.timestamp for a in recent] == [
            NOW + timedelta(seconds=4),
            NOW + timedelta(seconds=3),
        ]

    def test_category_stats_read_only(self, progression):
        progress = progression.snapshot()

        with pytest.raises(TypeError):
            progress.category_stats[ActionCategory.DATA] = None

    def test_to_dict_is_primitive(self, progression, make_action):
        progression.add_action(make_action(RefactoringKind.EXTRACT_CLASS))

        exported = progression.snapshot().to_dict()

        assert exported["total_xp"] == 15
        assert exported["categories"]["STRUCTURE"]["most_frequent_kind"] == "EXTRACT_CLASS"
        assert exported["tier"] == "Apprentice"
