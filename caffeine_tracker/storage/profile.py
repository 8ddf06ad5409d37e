"""
User profile persistence.

Tracks onboarding progress and personal settings.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, Optional

from .gateway import StorageGateway
from .models import HeartRateSensitivity, ImportantTimeSlot, UserProfile
from .serialization import DeserializationError, decode_profile, encode_profile

logger = logging.getLogger(__name__)

PROFILE_KEY = "user_profile"

# Onboarding is two screens: sensitivity questions, then the daily schedule.
STEP_SENSITIVITY = 0
STEP_SCHEDULE = 1
STEP_DONE = 2


class ProfileRepository:
    """Holds the current UserProfile and persists it after every change."""

    def __init__(
        self,
        gateway: StorageGateway,
        clock: Callable[[], datetime] = datetime.now,
        default_max_caffeine_mg: Optional[int] = None
    ):
        """Initialize the repository and load the stored profile.

        Args:
            gateway: Key-value storage the profile is read from and written to
            clock: Source of the current time, injectable for tests
            default_max_caffeine_mg: Ceiling used when no profile is stored yet
        """
        self.gateway = gateway
        self.clock = clock
        self.default_max_caffeine_mg = default_max_caffeine_mg
        self._profile = self._load()

    @property
    def profile(self) -> UserProfile:
        return self._profile

    @property
    def needs_onboarding(self) -> bool:
        return not self._profile.onboarding_complete or self._profile.onboarding_step < STEP_DONE

    def update(self, **changes) -> UserProfile:
        """Apply field changes, stamp the update time and persist.

        Raises:
            TypeError: If an unknown field is passed
            ValueError: If a value is outside its allowed range
        """
        self._profile = replace(self._profile, last_updated_at=self.clock(), **changes)
        logger.debug("Profile updated: %s", ", ".join(sorted(changes)))
        self._save()
        return self._profile

    def complete_sensitivity_step(
        self,
        tolerance: int,
        heart_rate_sensitivity: HeartRateSensitivity
    ) -> UserProfile:
        return self.update(
            tolerance=tolerance,
            heart_rate_sensitivity=heart_rate_sensitivity,
            onboarding_step=STEP_SCHEDULE
        )

    def complete_schedule_step(
        self,
        bedtime: str,
        wake_time: str,
        important_time_slots: Iterable[ImportantTimeSlot]
    ) -> UserProfile:
        return self.update(
            bedtime=bedtime,
            wake_time=wake_time,
            important_time_slots=frozenset(important_time_slots),
            onboarding_step=STEP_DONE,
            onboarding_complete=True
        )

    def restart_onboarding(self) -> UserProfile:
        """Send the user back through the sensitivity questions."""
        return self.update(onboarding_step=STEP_SENSITIVITY, onboarding_complete=False)

    def set_sleep_window(self, bedtime: str, wake_time: str) -> UserProfile:
        return self.update(bedtime=bedtime, wake_time=wake_time)

    def set_target_sleep_hours(self, hours: float) -> UserProfile:
        return self.update(target_sleep_hours=hours)

    def set_max_caffeine_mg(self, max_caffeine_mg: int) -> UserProfile:
        return self.update(max_caffeine_mg=max_caffeine_mg)

    def _default_profile(self) -> UserProfile:
        if self.default_max_caffeine_mg is None:
            return UserProfile()
        return UserProfile(max_caffeine_mg=self.default_max_caffeine_mg)

    def _load(self) -> UserProfile:
        raw = self.gateway.get(PROFILE_KEY)
        if raw is None:
            return self._default_profile()
        try:
            return decode_profile(raw)
        except DeserializationError as e:
            logger.warning("Discarding unreadable profile: %s", e)
            return self._default_profile()

    def _save(self) -> None:
        try:
            payload = encode_profile(self._profile)
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning("Profile not persisted: %s", e)
            return
        self.gateway.set(PROFILE_KEY, payload)
