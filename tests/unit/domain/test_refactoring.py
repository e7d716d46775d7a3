"""
Unit tests for the refactoring taxonomy and DetectedAction value object.
"""

from datetime import datetime, timezone

import pytest

from refactor_rpg.domain.models.base import (
    DomainValidationError,
    from_epoch_millis,
    to_epoch_millis,
)
from refactor_rpg.domain.models.refactoring import (
    ELEMENT_HINT_MAX_LENGTH,
    ActionCategory,
    DetectedAction,
    RefactoringKind,
)

NOW = datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)


@pytest.mark.unit
@pytest.mark.domain
class TestRefactoringKind:
    """Test static metadata carried by each kind."""

    def test_taxonomy_size(self):
        assert len(RefactoringKind) == 34

    def test_every_kind_has_positive_xp(self):
        assert all(kind.base_xp > 0 for kind in RefactoringKind)

    def test_extract_method_metadata(self):
        kind = RefactoringKind.EXTRACT_METHOD
        assert kind.display_name == "Extract Method"
        assert kind.category is ActionCategory.STRUCTURE
        assert kind.base_xp == 10
        assert kind.gameplay_tag == "🧪 Clarity"

    def test_kind_id_round_trip(self):
        for kind in RefactoringKind:
            assert RefactoringKind.from_id(kind.kind_id) is kind

    def test_unknown_kind_id(self):
        assert RefactoringKind.from_id("TELEPORT_METHOD") is None

    def test_every_category_is_populated(self):
        for category in ActionCategory:
            assert RefactoringKind.in_category(category)

    def test_category_display_metadata(self):
        assert ActionCategory.LOGIC.display_name == "Logic & Complexity"
        assert ActionCategory.COUPLING.icon == "🔗"


@pytest.mark.unit
@pytest.mark.domain
class TestDetectedAction:
    """Test the accepted detection value object."""

    def test_xp_and_category_come_from_kind(self):
        action = DetectedAction(RefactoringKind.BREAK_CYCLIC_DEPENDENCY, NOW)
        assert action.xp == 25
        assert action.category is ActionCategory.COUPLING

    def test_element_hint_truncated(self):
        # Arrange
        long_hint = "x" * 80

        # Act
        action = DetectedAction(RefactoringKind.RENAME, NOW, element_hint=long_hint)

        # Assert
        assert len(action.element_hint) == ELEMENT_HINT_MAX_LENGTH

    def test_naive_timestamp_rejected(self):
        with pytest.raises(DomainValidationError) as exc_info:
            DetectedAction(RefactoringKind.RENAME, datetime(2025, 1, 1))

        assert exc_info.value.field == "timestamp"

    def test_is_immutable(self):
        action = DetectedAction(RefactoringKind.RENAME, NOW)
        with pytest.raises(AttributeError):
            action.kind = RefactoringKind.EXTRACT_METHOD


@pytest.mark.unit
@pytest.mark.domain
class TestEpochMillis:
    def test_round_trip(self):
        assert from_epoch_millis(to_epoch_millis(NOW)) == NOW

    def test_millisecond_precision(self):
        assert to_epoch_millis(from_epoch_millis(1_736_933_400_123)) == 1_736_933_400_123
