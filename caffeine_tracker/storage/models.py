"""
Data models for storage layer.

Defines the intake, beverage and profile records that are persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Optional


class BeverageCategory(Enum):
    """Catalog grouping used for browsing beverages."""
    COFFEE = "coffee"
    OTHER = "other"


class HeartRateSensitivity(Enum):
    """How often the user reports a racing heart after caffeine."""
    OFTEN = "often"
    SOMETIMES = "sometimes"
    RARELY = "rarely"
    NEVER = "never"


class ImportantTimeSlot(Enum):
    """Time slots in which the user has most of their important schedule."""
    MORNING = "morning"  # 09:00-12:00
    EARLY_AFTERNOON = "afternoon1"  # 13:00-15:00
    LATE_AFTERNOON = "afternoon2"  # 15:00-18:00


@dataclass(frozen=True)
class Dose:
    """Immutable record of a single caffeine intake.

    Doses form an append-only ledger. They are never edited, only dropped
    by retention trimming once they fall out of the retention window.
    """
    id: str
    amount_mg: int
    occurred_at: datetime


@dataclass(frozen=True)
class Beverage:
    """Catalog entry describing a typical caffeinated drink."""
    id: str
    name: str
    amount_mg: int
    icon: str
    category: BeverageCategory


DEFAULT_BEDTIME = "23:30"
DEFAULT_WAKE_TIME = "07:30"
DEFAULT_MAX_CAFFEINE_MG = 400
DEFAULT_TARGET_SLEEP_HOURS = 7.5


@dataclass(frozen=True)
class UserProfile:
    """User preferences collected through onboarding and the settings screen.

    A max_caffeine_mg of 0 is a legal setting; consumers must not divide by it.
    """
    bedtime: str = DEFAULT_BEDTIME
    wake_time: str = DEFAULT_WAKE_TIME
    important_time_slots: FrozenSet[ImportantTimeSlot] = field(default_factory=frozenset)
    tolerance: int = 50
    heart_rate_sensitivity: Optional[HeartRateSensitivity] = None
    max_caffeine_mg: int = DEFAULT_MAX_CAFFEINE_MG
    target_sleep_hours: float = DEFAULT_TARGET_SLEEP_HOURS
    onboarding_step: int = 0
    onboarding_complete: bool = False
    last_updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate profile values are within their allowed ranges."""
        if not 0 <= self.tolerance <= 100:
            raise ValueError("tolerance must be between 0 and 100")
        if self.max_caffeine_mg < 0:
            raise ValueError("max_caffeine_mg cannot be negative")
        if self.target_sleep_hours < 0:
            raise ValueError("target_sleep_hours cannot be negative")
        if self.onboarding_step < 0:
            raise ValueError("onboarding_step cannot be negative")
