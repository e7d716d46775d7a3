"""
Unit tests for progression formulas: threshold curve, level scan, titles.
"""

import pytest

from refactor_rpg.domain.models.progress import LevelTier
from refactor_rpg.modules.shared.formulas import (
    level_for_xp,
    level_progress,
    tier_for_level,
    title_for_level,
    xp_threshold,
)


@pytest.mark.unit
@pytest.mark.domain
class TestXpThreshold:
    """Test the cumulative threshold curve."""

    @pytest.mark.parametrize("level", [-3, 0, 1])
    def test_zero_at_or_below_level_one(self, level):
        assert xp_threshold(level) == 0

    @pytest.mark.parametrize(
        "level, expected",
        [(2, 282), (3, 519), (4, 800), (5, 1118), (10, 3162)],
    )
    def test_known_values(self, level, expected):
        assert xp_threshold(level) == expected

    def test_strictly_increasing_from_level_two(self):
        thresholds = [xp_threshold(level) for level in range(2, 300)]
        assert all(a < b for a, b in zip(thresholds, thresholds[1:]))

    def test_custom_curve(self):
        assert xp_threshold(2, base=50, exponent=2.0) == 200


@pytest.mark.unit
@pytest.mark.domain
class TestLevelForXp:
    """Test the upward level scan."""

    def test_zero_xp_is_level_one(self):
        assert level_for_xp(0) == 1

    def test_boundary(self):
        assert level_for_xp(281) == 1
        assert level_for_xp(282) == 2

    def test_inverse_of_threshold(self):
        for level in range(1, 200):
            assert level_for_xp(xp_threshold(level)) == level

    def test_xp_lies_between_level_thresholds(self):
        for total_xp in range(0, 25_000, 37):
            level = level_for_xp(total_xp)
            assert xp_threshold(level) <= total_xp < xp_threshold(level + 1)

    @pytest.mark.parametrize("level", [10_000, 10_001, 54_321, 250_000])
    def test_inverse_holds_for_high_levels(self, level):
        assert level_for_xp(xp_threshold(level)) == level
        assert level_for_xp(xp_threshold(level) - 1) == level - 1

    @pytest.mark.parametrize("total_xp", [10**9, 10**9 + 7, 3 * 10**11, 10**15])
    def test_large_totals_bracketed(self, total_xp):
        level = level_for_xp(total_xp)

        assert xp_threshold(level) <= total_xp < xp_threshold(level + 1)

    def test_custom_curve_bracketed(self):
        for total_xp in (0, 9, 10, 28, 29, 5_000, 10**8):
            level = level_for_xp(total_xp, base=10, exponent=1.5)
            assert xp_threshold(level, 10, 1.5) <= total_xp < xp_threshold(level + 1, 10, 1.5)

    def test_negative_xp_rejected(self):
        with pytest.raises(ValueError):
            level_for_xp(-1)


@pytest.mark.unit
@pytest.mark.domain
class TestLevelProgress:
    def test_halfway_through_level_one(self):
        assert level_progress(141, 1) == pytest.approx(0.5, abs=0.01)

    def test_start_of_level(self):
        assert level_progress(282, 2) == 0.0

    def test_clamped_to_unit_interval(self):
        assert level_progress(10_000, 1) == 1.0
        assert level_progress(0, 5) == 0.0


@pytest.mark.unit
@pytest.mark.domain
class TestTitlesAndTiers:
    @pytest.mark.parametrize(
        "level, title, tier",
        [
            (1, "Refactoring Apprentice", LevelTier.APPRENTICE),
            (4, "Refactoring Apprentice", LevelTier.APPRENTICE),
            (5, "Refactorer", LevelTier.REFACTORER),
            (10, "Expert Refactorer", LevelTier.EXPERT),
            (20, "Refactoring Master", LevelTier.MASTER),
            (30, "Grand Master", LevelTier.GRAND_MASTER),
            (50, "Grand Master", LevelTier.GRAND_MASTER),
            (51, "Living Legend", LevelTier.LEGEND),
        ],
    )
    def test_title_and_tier(self, level, title, tier):
        assert title_for_level(level) == title
        assert tier_for_level(level) is tier
