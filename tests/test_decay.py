"""
Unit tests for the caffeine decay model.

Tests residual level computation and the values derived from it.
"""

from datetime import datetime, timedelta

import pytest

from caffeine_tracker.core.decay import (
    HALF_LIFE_HOURS,
    StatusLevel,
    awake_end_time,
    energy_level,
    percentage,
    residual_level,
    round_half_up,
    status_tier,
    time_since_last_intake,
)
from caffeine_tracker.storage.models import Dose

NOW = datetime(2024, 6, 15, 14, 0, 0)


def make_dose(amount_mg: int, hours_ago: float, dose_id: str = "dose") -> Dose:
    """Create a dose taken `hours_ago` before NOW."""
    return Dose(id=dose_id, amount_mg=amount_mg, occurred_at=NOW - timedelta(hours=hours_ago))


class TestResidualLevel:
    """Test exponential decay of recorded doses."""

    def test_single_dose_two_hours_ago(self):
        """80mg two hours ago decays to 80 * 0.5^(2/5)."""
        assert residual_level([make_dose(80, 2)], NOW) == 60.6

    def test_dose_at_now_is_undecayed(self):
        assert residual_level([make_dose(95, 0)], NOW) == 95.0

    def test_one_half_life(self):
        assert residual_level([make_dose(100, HALF_LIFE_HOURS)], NOW) == 50.0

    def test_empty_history_is_zero(self):
        assert residual_level([], NOW) == 0.0

    def test_future_dose_is_excluded(self):
        """Doses dated after now contribute nothing instead of a negative amount."""
        doses = [make_dose(100, 5, "past"), make_dose(200, -3, "future")]
        assert residual_level(doses, NOW) == 50.0

    def test_rounds_to_one_decimal(self):
        level = residual_level([make_dose(7, 1)], NOW)
        assert level == round_half_up(level, 1)

    def test_out_of_range_amount_does_not_crash(self):
        """Negative amounts are clamped to zero instead of raising."""
        assert residual_level([make_dose(-50, 1)], NOW) == 0.0

    def test_huge_amount_does_not_crash(self):
        """Totals beyond the default decimal precision still round."""
        level = residual_level([make_dose(10 ** 28, 1)], NOW)
        assert level == pytest.approx(10 ** 28 * 0.5 ** 0.2)

    def test_non_increasing_as_time_advances(self):
        """Without new doses the level never goes up."""
        doses = [make_dose(150, 10, "a"), make_dose(95, 3, "b"), make_dose(80, 0.5, "c")]
        previous = residual_level(doses, NOW)
        for minutes in range(15, 48 * 60, 15):
            current = residual_level(doses, NOW + timedelta(minutes=minutes))
            assert current <= previous
            previous = current

    def test_linearity_over_disjoint_histories(self):
        """The level of two histories combined is the sum of their levels."""
        first = [make_dose(100, 5, "a")]
        second = [make_dose(40, 10, "b")]

        combined = residual_level(first + second, NOW)
        assert combined == residual_level(first, NOW) + residual_level(second, NOW)
        assert combined == 60.0


class TestStatusTier:
    """Test status thresholds."""

    @pytest.mark.parametrize("level, expected", [
        (0, StatusLevel.NORMAL),
        (0.1, StatusLevel.LOW),
        (99.9, StatusLevel.LOW),
        (100, StatusLevel.MODERATE),
        (199.9, StatusLevel.MODERATE),
        (200, StatusLevel.HIGH),
        (299.9, StatusLevel.HIGH),
        (300, StatusLevel.VERY_HIGH),
        (1200, StatusLevel.VERY_HIGH),
    ])
    def test_thresholds(self, level, expected):
        assert status_tier(level).level == expected

    def test_zero_is_normal(self):
        tier = status_tier(0)
        assert tier.label == "normal"
        assert tier.icon
        assert tier.color_token.startswith("#")

    def test_very_high_label(self):
        assert status_tier(350).label == "very high"


class TestPercentage:
    """Test level as a share of the daily ceiling."""

    def test_half_of_default_ceiling(self):
        assert percentage(200) == 50.0

    def test_custom_ceiling(self):
        assert percentage(70, 140) == 50.0

    def test_capped_at_hundred(self):
        assert percentage(800, 400) == 100.0

    def test_zero_ceiling_with_caffeine(self):
        """A ceiling of zero reports any caffeine as 100%."""
        assert percentage(12.5, 0) == 100.0

    def test_zero_ceiling_without_caffeine(self):
        assert percentage(0, 0) == 0.0

    def test_always_within_bounds(self):
        for level in (0, 0.1, 1, 50, 399.9, 400, 401, 10000):
            for ceiling in (0, 1, 140, 400, 500):
                assert 0 <= percentage(level, ceiling) <= 100


class TestEnergyLevel:
    """Test energy estimate from percentage."""

    def test_baseline_energy(self):
        assert energy_level(0) == 20.0

    def test_midpoint(self):
        assert energy_level(50) == 60.0

    def test_full(self):
        assert energy_level(100) == 100.0

    def test_clamped(self):
        assert energy_level(150) == 100.0
        assert energy_level(-100) == 0.0


class TestAwakeEndTime:
    """Test estimated end of the stimulant effect."""

    def test_no_caffeine_returns_none(self):
        assert awake_end_time(0, NOW) is None

    def test_at_threshold_is_now(self):
        assert awake_end_time(10, NOW) == NOW

    def test_one_half_life_above_threshold(self):
        assert awake_end_time(20, NOW) == NOW + timedelta(hours=5)

    def test_two_half_lives_above_threshold(self):
        assert awake_end_time(40, NOW) == NOW + timedelta(hours=10)

    def test_below_threshold_lies_in_the_past(self):
        """Levels under 10mg produce a time before now; the formula is kept as-is."""
        assert awake_end_time(5, NOW) == NOW - timedelta(hours=5)

    def test_infinite_level_returns_none(self):
        assert awake_end_time(float("inf"), NOW) is None


class TestTimeSinceLastIntake:
    """Test lookup of the most recent dose."""

    def test_empty_history(self):
        assert time_since_last_intake([], NOW) is None

    def test_picks_latest_regardless_of_order(self):
        doses = [make_dose(95, 1, "b"), make_dose(150, 6, "a"), make_dose(80, 3, "c")]
        result = time_since_last_intake(doses, NOW)
        assert result.timestamp == NOW - timedelta(hours=1)
        assert result.hours_elapsed == pytest.approx(1.0)

    def test_future_dose_gives_negative_elapsed(self):
        result = time_since_last_intake([make_dose(95, -2)], NOW)
        assert result.hours_elapsed == pytest.approx(-2.0)


class TestRoundHalfUp:
    """Test rounding helper."""

    def test_half_rounds_away_from_zero(self):
        assert round_half_up(2.5) == 3.0
        assert round_half_up(12.5) == 13.0

    def test_one_decimal(self):
        assert round_half_up(0.05, 1) == 0.1
        assert round_half_up(60.6286, 1) == 60.6

    def test_large_magnitude(self):
        assert round_half_up(1e300, 1) == 1e300
        assert round_half_up(123456789012345678901234567890.25, 1) == pytest.approx(1.2345678901234568e29)

    def test_non_finite_passes_through(self):
        assert round_half_up(float("inf"), 1) == float("inf")
