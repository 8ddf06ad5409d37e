"""
Sleep disruption forecast.

Heuristic score for how likely the most recent intake is to interfere with
the user's bedtime.
"""

from datetime import datetime, timedelta
from typing import Optional, Tuple

from .decay import LastIntake, round_half_up

# Intake closer than this to bedtime counts as disruptive.
DISRUPTION_WINDOW_HOURS = 8.0


def parse_clock_time(text: str) -> Optional[Tuple[int, int]]:
    """Parse "HH:MM" into (hour, minute).

    Returns:
        (hour, minute), or None if text is not a valid 24-hour clock time
    """
    if not isinstance(text, str):
        return None
    parts = text.strip().split(":")
    if len(parts) != 2:
        return None
    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour, minute


def next_bedtime(bedtime: str, now: datetime) -> Optional[datetime]:
    """Next occurrence of the bedtime wall-clock time at or after `now`.

    Returns:
        Bedtime instant, or None if bedtime cannot be parsed
    """
    parsed = parse_clock_time(bedtime)
    if parsed is None:
        return None

    hour, minute = parsed
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate < now:
        candidate += timedelta(days=1)
    return candidate


def disruption_probability(
    last_intake: Optional[LastIntake],
    bedtime: str,
    now: datetime
) -> int:
    """Probability (0-100) that the last intake disrupts tonight's sleep.

    Falls linearly from 100 for intake at bedtime to 0 for intake
    DISRUPTION_WINDOW_HOURS or more before it.

    Args:
        last_intake: Most recent intake, or None if nothing was recorded
        bedtime: User bedtime as "HH:MM"
        now: Current instant

    Returns:
        Integer probability; 0 if there is no intake or bedtime is malformed
    """
    if last_intake is None:
        return 0

    bedtime_at = next_bedtime(bedtime, now)
    if bedtime_at is None:
        return 0

    hours_until_bedtime = (bedtime_at - last_intake.timestamp).total_seconds() / 3600.0
    if hours_until_bedtime >= DISRUPTION_WINDOW_HOURS:
        return 0

    probability = round_half_up(100 - (hours_until_bedtime / DISRUPTION_WINDOW_HOURS) * 100)
    return int(min(100, max(0, probability)))
