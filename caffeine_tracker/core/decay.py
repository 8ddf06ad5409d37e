"""
Caffeine decay model.

Computes the residual caffeine level from the dose history using first-order
exponential elimination with a fixed half-life, and derives the display
values built on top of it (status tier, percentage, energy, awake end time).

All functions are pure. The current instant is always passed in by the
caller so results are deterministic under test.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP, localcontext
from enum import Enum
from typing import Iterable, Optional

from caffeine_tracker.storage.models import DEFAULT_MAX_CAFFEINE_MG, Dose

HALF_LIFE_HOURS = 5.0
# Level at which the stimulant effect is considered worn off.
AWAKE_THRESHOLD_MG = 10.0


class StatusLevel(Enum):
    """Status tiers for the current caffeine level."""
    NORMAL = "normal"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very high"


@dataclass(frozen=True)
class StatusTier:
    """Display attributes for a status level."""
    level: StatusLevel
    icon: str
    label: str
    color_token: str


@dataclass(frozen=True)
class LastIntake:
    """Most recent dose and how long ago it was taken."""
    hours_elapsed: float
    timestamp: datetime


_STATUS_TIERS = {
    StatusLevel.NORMAL: StatusTier(StatusLevel.NORMAL, "😴", "normal", "#4ecdc4"),
    StatusLevel.LOW: StatusTier(StatusLevel.LOW, "😊", "low", "#4ecdc4"),
    StatusLevel.MODERATE: StatusTier(StatusLevel.MODERATE, "😌", "moderate", "#44a08d"),
    StatusLevel.HIGH: StatusTier(StatusLevel.HIGH, "😐", "high", "#ffa500"),
    StatusLevel.VERY_HIGH: StatusTier(StatusLevel.VERY_HIGH, "😰", "very high", "#ff6b6b"),
}


def round_half_up(value: float, places: int = 0) -> float:
    """Round with halves away from zero instead of Python's banker's rounding.

    Args:
        value: Number to round
        places: Decimal places to keep

    Returns:
        Rounded value; non-finite input is returned unchanged
    """
    if not math.isfinite(value):
        return value

    exact = Decimal(str(value))
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # quantize needs every integer digit plus the kept places
        ctx.prec = max(ctx.prec, exact.adjusted() + places + 2)
        return float(exact.quantize(quantum, rounding=ROUND_HALF_UP))


def residual_level(snapshot: Iterable[Dose], now: datetime) -> float:
    """Compute the caffeine remaining at `now` across all doses.

    Each dose contributes amount * 0.5 ** (hours_elapsed / HALF_LIFE_HOURS).
    Doses dated after `now` are skipped rather than counted negatively.

    Args:
        snapshot: Dose history (any order)
        now: Instant to evaluate at

    Returns:
        Residual level in mg, >= 0, rounded to one decimal place
    """
    total = 0.0
    for dose in snapshot:
        hours_elapsed = (now - dose.occurred_at).total_seconds() / 3600.0
        if hours_elapsed < 0:
            continue
        total += dose.amount_mg * math.pow(0.5, hours_elapsed / HALF_LIFE_HOURS)

    return max(0.0, round_half_up(total, 1))


def status_tier(level: float) -> StatusTier:
    """Classify a residual level into a status tier.

    Thresholds: 0 normal, below 100 low, below 200 moderate, below 300 high,
    otherwise very high. Negative input is treated as 0.
    """
    if level <= 0:
        return _STATUS_TIERS[StatusLevel.NORMAL]
    if level < 100:
        return _STATUS_TIERS[StatusLevel.LOW]
    if level < 200:
        return _STATUS_TIERS[StatusLevel.MODERATE]
    if level < 300:
        return _STATUS_TIERS[StatusLevel.HIGH]
    return _STATUS_TIERS[StatusLevel.VERY_HIGH]


def percentage(level: float, max_caffeine_mg: int = DEFAULT_MAX_CAFFEINE_MG) -> float:
    """Residual level as a share of the daily ceiling, capped to [0, 100].

    A ceiling of 0 is a legal profile setting. In that case any positive
    level is reported as 100 and no caffeine as 0, instead of dividing by
    zero.
    """
    if level <= 0:
        return 0.0
    if max_caffeine_mg <= 0:
        return 100.0
    return min(100.0, level / max_caffeine_mg * 100)


def energy_level(pct: float) -> float:
    """Estimated energy level (0-100) from the caffeine percentage."""
    return min(100.0, max(0.0, pct * 0.8 + 20))


def awake_end_time(level: float, now: datetime) -> Optional[datetime]:
    """Estimate when the level decays to the awake threshold.

    Returns None when no caffeine is present, or when the level is too large
    to represent a finite end time.

    Note: for 0 < level < AWAKE_THRESHOLD_MG the log term is negative and the
    returned time lies in the past. The formula is kept as-is; callers should
    treat that regime as "already worn off".
    """
    if level <= 0 or not math.isfinite(level):
        return None
    hours_until_end = HALF_LIFE_HOURS * math.log2(level / AWAKE_THRESHOLD_MG)
    return now + timedelta(hours=hours_until_end)


def time_since_last_intake(snapshot: Iterable[Dose], now: datetime) -> Optional[LastIntake]:
    """Locate the most recent dose and the hours elapsed since it.

    Returns:
        LastIntake, or None if the history is empty
    """
    latest = max(snapshot, key=lambda dose: dose.occurred_at, default=None)
    if latest is None:
        return None

    hours_elapsed = (now - latest.occurred_at).total_seconds() / 3600.0
    return LastIntake(hours_elapsed=hours_elapsed, timestamp=latest.occurred_at)
