"""
Dashboard summary.

Bundles every derived value the home screen shows into one read-only
result, computed from a ledger snapshot and the user profile.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from .aggregation import today_entries, today_total
from .decay import (
    LastIntake,
    StatusTier,
    awake_end_time,
    energy_level,
    percentage,
    residual_level,
    status_tier,
    time_since_last_intake,
)
from .sleep import disruption_probability
from caffeine_tracker.storage.models import Dose, UserProfile


@dataclass(frozen=True)
class DashboardSummary:
    """Derived values for a single point in time."""
    generated_at: datetime
    level_mg: float
    status: StatusTier
    percentage: float
    energy: float
    awake_until: Optional[datetime]
    last_intake: Optional[LastIntake]
    today_total_mg: int
    max_caffeine_mg: int
    sleep_disruption: int
    todays_doses: List[Dose] = field(default_factory=list)


def summarize(snapshot: Sequence[Dose], profile: UserProfile, now: datetime) -> DashboardSummary:
    """Compute the dashboard summary.

    This is read-only and deterministic for a given snapshot, profile and
    `now`; the caller decides how often to refresh it.
    """
    doses = list(snapshot)
    level = residual_level(doses, now)
    pct = percentage(level, profile.max_caffeine_mg)
    last_intake = time_since_last_intake(doses, now)

    return DashboardSummary(
        generated_at=now,
        level_mg=level,
        status=status_tier(level),
        percentage=pct,
        energy=energy_level(pct),
        awake_until=awake_end_time(level, now),
        last_intake=last_intake,
        today_total_mg=today_total(doses, now),
        max_caffeine_mg=profile.max_caffeine_mg,
        sleep_disruption=disruption_probability(last_intake, profile.bedtime, now),
        todays_doses=today_entries(doses, now)
    )
