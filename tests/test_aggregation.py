"""
Unit tests for daily aggregation.

Tests day windows, trailing rollups and the closest-beverage lookup.
"""

from datetime import date, datetime, timedelta

import pytest

from caffeine_tracker.core.aggregation import (
    DailyTotal,
    closest_beverage,
    daily_total,
    monthly_rollup,
    rollup,
    start_of_day,
    today_entries,
    today_total,
    weekly_rollup,
)
from caffeine_tracker.core.catalog import BEVERAGE_CATALOG
from caffeine_tracker.storage.models import Beverage, BeverageCategory, Dose

NOW = datetime(2024, 6, 15, 14, 30, 0)
TODAY = datetime(2024, 6, 15)


def make_dose(amount_mg: int, occurred_at: datetime, dose_id: str = "dose") -> Dose:
    return Dose(id=dose_id, amount_mg=amount_mg, occurred_at=occurred_at)


class TestDailyTotal:
    """Test half-open day windows."""

    def test_start_inclusive_end_exclusive(self):
        """A dose exactly at day_start counts, one exactly at day_end does not."""
        day_start = TODAY
        day_end = TODAY + timedelta(days=1)
        doses = [
            make_dose(95, day_start, "start"),
            make_dose(150, day_end, "end"),
            make_dose(30, day_start + timedelta(hours=12), "midday"),
        ]
        assert daily_total(doses, day_start, day_end) == 125

    def test_empty_window(self):
        assert daily_total([], TODAY, TODAY + timedelta(days=1)) == 0

    def test_start_of_day(self):
        assert start_of_day(NOW) == TODAY


class TestTodayTotal:
    """Test today's intake total."""

    def test_counts_only_today(self):
        doses = [
            make_dose(95, TODAY + timedelta(hours=8), "morning"),
            make_dose(80, TODAY + timedelta(hours=13), "lunch"),
            make_dose(200, TODAY - timedelta(minutes=1), "yesterday"),
        ]
        assert today_total(doses, NOW) == 175

    def test_includes_later_today(self):
        """Doses later today but after now still fall in today's window."""
        doses = [make_dose(50, TODAY + timedelta(hours=20))]
        assert today_total(doses, NOW) == 50


class TestRollup:
    """Test trailing per-day rollups."""

    def test_weekly_has_seven_entries(self):
        result = rollup([], NOW, 7)
        assert len(result) == 7
        assert result[0].day == date(2024, 6, 9)
        assert result[-1].day == NOW.date()

    def test_monthly_has_thirty_entries(self):
        result = rollup([], NOW, 30)
        assert len(result) == 30
        assert result[0].day == date(2024, 5, 17)
        assert result[-1].day == NOW.date()

    def test_ascending_order(self):
        for days in (7, 30):
            result = rollup([], NOW, days)
            assert [entry.day for entry in result] == sorted(entry.day for entry in result)

    def test_totals_land_in_their_day(self):
        doses = [
            make_dose(95, TODAY + timedelta(hours=9), "today"),
            make_dose(150, TODAY - timedelta(days=1) + timedelta(hours=10), "yesterday-a"),
            make_dose(80, TODAY - timedelta(days=1) + timedelta(hours=16), "yesterday-b"),
            make_dose(200, TODAY - timedelta(days=6), "week-start"),
            make_dose(120, TODAY - timedelta(days=7), "outside"),
        ]
        result = weekly_rollup(doses, NOW)

        assert result[-1] == DailyTotal(day=date(2024, 6, 15), total_mg=95)
        assert result[-2] == DailyTotal(day=date(2024, 6, 14), total_mg=230)
        assert result[0] == DailyTotal(day=date(2024, 6, 9), total_mg=200)
        assert sum(entry.total_mg for entry in result) == 525

    def test_monthly_helper(self):
        doses = [make_dose(120, TODAY - timedelta(days=7), "week-old")]
        result = monthly_rollup(doses, NOW)
        assert len(result) == 30
        assert result[-8].total_mg == 120

    def test_unsupported_window(self):
        with pytest.raises(ValueError, match="days must be one of"):
            rollup([], NOW, 14)


class TestTodayEntries:
    """Test today's dose list."""

    def test_newest_first(self):
        doses = [
            make_dose(95, TODAY + timedelta(hours=8), "first"),
            make_dose(80, TODAY + timedelta(hours=13), "third"),
            make_dose(150, TODAY + timedelta(hours=10), "second"),
            make_dose(200, TODAY - timedelta(hours=2), "yesterday"),
        ]
        result = today_entries(doses, NOW)
        assert [dose.id for dose in result] == ["third", "second", "first"]

    def test_empty(self):
        assert today_entries([], NOW) == []


class TestClosestBeverage:
    """Test reverse lookup from an amount to a catalog beverage."""

    def test_exact_match(self):
        assert closest_beverage(95).name == "Americano"

    def test_tie_goes_to_first_in_catalog(self):
        """Several beverages have 150mg; the first listed wins."""
        assert closest_beverage(150).name == "Cafe Latte"

    def test_equidistant_neighbors(self):
        """35mg is 5mg from Chocolate (40) and Black Tea (30); Chocolate is listed first."""
        assert closest_beverage(35).name == "Chocolate"

    def test_small_amount(self):
        assert closest_beverage(1).name == "Cocoa"

    def test_large_amount(self):
        assert closest_beverage(500).name == "Espresso"

    def test_custom_catalog(self):
        catalog = [
            Beverage("a", "Small", 10, "☕", BeverageCategory.COFFEE),
            Beverage("b", "Large", 100, "☕", BeverageCategory.COFFEE),
        ]
        assert closest_beverage(60, catalog).name == "Large"

    def test_empty_catalog(self):
        assert closest_beverage(95, []) is None

    def test_default_catalog_is_used(self):
        assert closest_beverage(85) in BEVERAGE_CATALOG
