"""
JSON codecs for persisted collections.

Every slot is stored as UTF-8 encoded JSON. Timestamps are ISO-8601 strings
so that naive and timezone-aware datetimes both round-trip unchanged.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Sequence

from .models import (
    Beverage,
    BeverageCategory,
    Dose,
    HeartRateSensitivity,
    ImportantTimeSlot,
    UserProfile,
)


class DeserializationError(ValueError):
    """Raised when a stored payload cannot be turned back into records."""


def encode_doses(doses: Sequence[Dose]) -> bytes:
    payload = [
        {
            "id": dose.id,
            "amount_mg": dose.amount_mg,
            "occurred_at": dose.occurred_at.isoformat(),
        }
        for dose in doses
    ]
    return _dump(payload)


def decode_doses(raw: bytes) -> List[Dose]:
    """Decode a stored dose collection.

    Raises:
        DeserializationError: If the payload is not a list of dose objects
    """
    items = _load_list(raw)
    try:
        return [
            Dose(
                id=str(item["id"]),
                amount_mg=int(item["amount_mg"]),
                occurred_at=datetime.fromisoformat(item["occurred_at"])
            )
            for item in items
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise DeserializationError(f"Invalid dose record: {e}") from e


def encode_beverages(beverages: Sequence[Beverage]) -> bytes:
    payload = [
        {
            "id": beverage.id,
            "name": beverage.name,
            "amount_mg": beverage.amount_mg,
            "icon": beverage.icon,
            "category": beverage.category.value,
        }
        for beverage in beverages
    ]
    return _dump(payload)


def decode_beverages(raw: bytes) -> List[Beverage]:
    """Decode a stored beverage collection.

    Raises:
        DeserializationError: If the payload is not a list of beverage objects
    """
    items = _load_list(raw)
    try:
        return [
            Beverage(
                id=str(item["id"]),
                name=str(item["name"]),
                amount_mg=int(item["amount_mg"]),
                icon=str(item["icon"]),
                category=BeverageCategory(item["category"])
            )
            for item in items
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise DeserializationError(f"Invalid beverage record: {e}") from e


def encode_profile(profile: UserProfile) -> bytes:
    payload = {
        "bedtime": profile.bedtime,
        "wake_time": profile.wake_time,
        "important_time_slots": sorted(slot.value for slot in profile.important_time_slots),
        "tolerance": profile.tolerance,
        "heart_rate_sensitivity": (
            profile.heart_rate_sensitivity.value
            if profile.heart_rate_sensitivity is not None else None
        ),
        "max_caffeine_mg": profile.max_caffeine_mg,
        "target_sleep_hours": profile.target_sleep_hours,
        "onboarding_step": profile.onboarding_step,
        "onboarding_complete": profile.onboarding_complete,
        "last_updated_at": (
            profile.last_updated_at.isoformat()
            if profile.last_updated_at is not None else None
        ),
    }
    return _dump(payload)


def decode_profile(raw: bytes) -> UserProfile:
    """Decode a stored profile. Missing keys take the profile defaults.

    Raises:
        DeserializationError: If the payload is not a valid profile object
    """
    data = _load(raw)
    if not isinstance(data, dict):
        raise DeserializationError("Profile payload must be an object")

    defaults = UserProfile()
    try:
        sensitivity = data.get("heart_rate_sensitivity")
        updated_at = data.get("last_updated_at")
        return UserProfile(
            bedtime=str(data.get("bedtime", defaults.bedtime)),
            wake_time=str(data.get("wake_time", defaults.wake_time)),
            important_time_slots=frozenset(
                ImportantTimeSlot(value) for value in data.get("important_time_slots", [])
            ),
            tolerance=int(data.get("tolerance", defaults.tolerance)),
            heart_rate_sensitivity=(
                HeartRateSensitivity(sensitivity) if sensitivity is not None else None
            ),
            max_caffeine_mg=int(data.get("max_caffeine_mg", defaults.max_caffeine_mg)),
            target_sleep_hours=float(data.get("target_sleep_hours", defaults.target_sleep_hours)),
            onboarding_step=int(data.get("onboarding_step", defaults.onboarding_step)),
            onboarding_complete=bool(data.get("onboarding_complete", defaults.onboarding_complete)),
            last_updated_at=(
                datetime.fromisoformat(updated_at) if updated_at is not None else None
            )
        )
    except (TypeError, ValueError) as e:
        raise DeserializationError(f"Invalid profile record: {e}") from e


def _dump(payload: Any) -> bytes:
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


def _load(raw: bytes) -> Any:
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DeserializationError(f"Stored payload is not valid JSON: {e}") from e


def _load_list(raw: bytes) -> List[Dict[str, Any]]:
    items = _load(raw)
    if not isinstance(items, list):
        raise DeserializationError("Stored payload must be a list")
    return items
