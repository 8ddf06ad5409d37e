"""
Unit tests for the sleep disruption forecast.
"""

from datetime import datetime, timedelta

import pytest

from caffeine_tracker.core.decay import LastIntake
from caffeine_tracker.core.sleep import (
    disruption_probability,
    next_bedtime,
    parse_clock_time,
)

NOW = datetime(2024, 6, 15, 14, 0, 0)


def intake_at(timestamp: datetime) -> LastIntake:
    return LastIntake(hours_elapsed=(NOW - timestamp).total_seconds() / 3600.0, timestamp=timestamp)


class TestParseClockTime:
    """Test HH:MM parsing."""

    def test_valid(self):
        assert parse_clock_time("23:00") == (23, 0)
        assert parse_clock_time("07:05") == (7, 5)
        assert parse_clock_time("0:00") == (0, 0)

    @pytest.mark.parametrize("text", ["", "abc", "23", "23:00:00", "24:00", "12:60", "-1:30", "ab:cd"])
    def test_malformed(self, text):
        assert parse_clock_time(text) is None

    def test_non_string(self):
        assert parse_clock_time(None) is None


class TestNextBedtime:
    """Test resolving bedtime to an instant."""

    def test_later_today(self):
        assert next_bedtime("23:00", NOW) == datetime(2024, 6, 15, 23, 0)

    def test_already_passed_rolls_to_tomorrow(self):
        assert next_bedtime("01:00", NOW) == datetime(2024, 6, 16, 1, 0)

    def test_exactly_now_is_today(self):
        assert next_bedtime("14:00", NOW) == NOW

    def test_malformed(self):
        assert next_bedtime("late", NOW) is None


class TestDisruptionProbability:
    """Test the bedtime disruption heuristic."""

    def test_six_hours_before_bedtime(self):
        """Intake 6h before a 23:00 bedtime gives 100 - 6/8 * 100 = 25."""
        last = intake_at(datetime(2024, 6, 15, 17, 0))
        assert disruption_probability(last, "23:00", NOW) == 25

    def test_no_intake(self):
        assert disruption_probability(None, "23:00", NOW) == 0

    def test_malformed_bedtime(self):
        last = intake_at(datetime(2024, 6, 15, 13, 0))
        assert disruption_probability(last, "eleven", NOW) == 0

    def test_eight_hours_or_more(self):
        assert disruption_probability(intake_at(datetime(2024, 6, 15, 15, 0)), "23:00", NOW) == 0
        assert disruption_probability(intake_at(datetime(2024, 6, 15, 8, 0)), "23:00", NOW) == 0

    def test_half_rounds_up(self):
        """7h before bedtime is 12.5, rounded half up to 13."""
        last = intake_at(datetime(2024, 6, 15, 16, 0))
        assert disruption_probability(last, "23:00", NOW) == 13

    def test_intake_at_bedtime(self):
        now = datetime(2024, 6, 15, 22, 0)
        last = LastIntake(hours_elapsed=0.0, timestamp=now)
        assert disruption_probability(last, "22:00", now) == 100

    def test_bedtime_after_midnight(self):
        """A 01:00 bedtime after 23:00 intake is two hours away."""
        now = datetime(2024, 6, 15, 23, 30)
        last = LastIntake(hours_elapsed=0.5, timestamp=datetime(2024, 6, 15, 23, 0))
        assert disruption_probability(last, "01:00", now) == 75

    def test_passed_bedtime_uses_tomorrow(self):
        """Once tonight's bedtime has passed, tomorrow's is a day away."""
        now = datetime(2024, 6, 15, 23, 30)
        last = LastIntake(hours_elapsed=0.2, timestamp=datetime(2024, 6, 15, 23, 20))
        assert disruption_probability(last, "23:00", now) == 0

    def test_clamped_to_hundred(self):
        """An intake dated after bedtime cannot push the score above 100."""
        last = LastIntake(hours_elapsed=-10.0, timestamp=datetime(2024, 6, 16, 0, 0))
        assert disruption_probability(last, "23:00", NOW) == 100
