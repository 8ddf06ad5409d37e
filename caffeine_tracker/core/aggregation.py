"""
Daily intake aggregation.

Day-bucketed totals over the dose history, plus the reverse lookup used to
label a raw dose with a familiar beverage.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from .catalog import BEVERAGE_CATALOG
from caffeine_tracker.storage.models import Beverage, Dose

WEEKLY_DAYS = 7
MONTHLY_DAYS = 30
SUPPORTED_WINDOWS = (WEEKLY_DAYS, MONTHLY_DAYS)


@dataclass(frozen=True)
class DailyTotal:
    """Total intake for one calendar day."""
    day: date
    total_mg: int


def start_of_day(moment: datetime) -> datetime:
    """Midnight of the calendar day containing `moment` (tzinfo preserved)."""
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def daily_total(snapshot: Iterable[Dose], day_start: datetime, day_end: datetime) -> int:
    """Sum of doses with day_start <= occurred_at < day_end."""
    return sum(
        dose.amount_mg for dose in snapshot
        if day_start <= dose.occurred_at < day_end
    )


def today_total(snapshot: Iterable[Dose], now: datetime) -> int:
    day_start = start_of_day(now)
    return daily_total(snapshot, day_start, day_start + timedelta(days=1))


def rollup(snapshot: Sequence[Dose], now: datetime, days: int) -> List[DailyTotal]:
    """Per-day totals for the trailing window ending today.

    Args:
        snapshot: Dose history (any order)
        now: Current instant; its day is the last entry
        days: Window length, 7 or 30

    Returns:
        One DailyTotal per calendar day, oldest first

    Raises:
        ValueError: If days is not a supported window
    """
    if days not in SUPPORTED_WINDOWS:
        raise ValueError(f"days must be one of {SUPPORTED_WINDOWS}")

    doses = list(snapshot)
    totals = []
    for offset in range(days - 1, -1, -1):
        day_start = start_of_day(now - timedelta(days=offset))
        day_end = day_start + timedelta(days=1)
        totals.append(DailyTotal(
            day=day_start.date(),
            total_mg=daily_total(doses, day_start, day_end)
        ))
    return totals


def weekly_rollup(snapshot: Sequence[Dose], now: datetime) -> List[DailyTotal]:
    return rollup(snapshot, now, WEEKLY_DAYS)


def monthly_rollup(snapshot: Sequence[Dose], now: datetime) -> List[DailyTotal]:
    return rollup(snapshot, now, MONTHLY_DAYS)


def today_entries(snapshot: Iterable[Dose], now: datetime) -> List[Dose]:
    """Doses taken today, newest first."""
    day_start = start_of_day(now)
    day_end = day_start + timedelta(days=1)
    todays = [dose for dose in snapshot if day_start <= dose.occurred_at < day_end]
    return sorted(todays, key=lambda dose: dose.occurred_at, reverse=True)


def closest_beverage(
    amount_mg: int,
    catalog: Sequence[Beverage] = BEVERAGE_CATALOG
) -> Optional[Beverage]:
    """Catalog beverage whose caffeine content is closest to `amount_mg`.

    Ties go to the beverage listed first. This is a display label only;
    doses keep no reference to a beverage.

    Returns:
        Closest beverage, or None if the catalog is empty
    """
    closest = None
    min_diff = None
    for beverage in catalog:
        diff = abs(amount_mg - beverage.amount_mg)
        if min_diff is None or diff < min_diff:
            closest = beverage
            min_diff = diff
    return closest
