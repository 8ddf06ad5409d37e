"""
Repository pattern for data access.

Owns the intake ledger and the favorites collection and keeps them in sync
with the storage gateway.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from .gateway import StorageGateway
from .models import Beverage, Dose
from .serialization import (
    DeserializationError,
    decode_beverages,
    decode_doses,
    encode_beverages,
    encode_doses,
)

logger = logging.getLogger(__name__)

HISTORY_KEY = "caffeine_history"
FAVORITES_KEY = "caffeine_favorites"
RETENTION_DAYS = 30


class IntakeLedger:
    """Append-only ledger of recorded doses.

    Every mutating call writes the whole collection through to the gateway
    before returning. If the collection cannot be serialized, the failure is
    logged and the in-memory state still reflects the mutation.
    """

    def __init__(
        self,
        gateway: StorageGateway,
        clock: Callable[[], datetime] = datetime.now,
        retention_days: int = RETENTION_DAYS
    ):
        """Initialize the ledger and load any persisted history.

        Args:
            gateway: Key-value storage the history is read from and written to
            clock: Source of the current time, injectable for tests
            retention_days: Doses older than this are trimmed after each insert
        """
        if retention_days <= 0:
            raise ValueError("retention_days must be > 0")

        self.gateway = gateway
        self.clock = clock
        self.retention = timedelta(days=retention_days)
        self._doses: List[Dose] = self._load()

    def __len__(self) -> int:
        return len(self._doses)

    def record(self, amount_mg: int, at: Optional[datetime] = None) -> Dose:
        """Append a new dose, trim expired history and persist.

        The amount is not validated here; callers bound it before recording.

        Args:
            amount_mg: Caffeine amount in milligrams
            at: When the dose was taken (defaults to now)

        Returns:
            The recorded dose

        Raises:
            TypeError: If `at` mixes naive and timezone-aware datetimes with the
                ledger clock; the ledger is left unchanged
        """
        dose = Dose(
            id=str(uuid.uuid4()),
            amount_mg=amount_mg,
            occurred_at=at if at is not None else self.clock()
        )
        self._doses = self._retained(self._doses + [dose], self.clock())
        logger.debug("Recorded dose %s: %s mg at %s", dose.id, dose.amount_mg, dose.occurred_at.isoformat())
        self._save()
        return dose

    def snapshot(self) -> Tuple[Dose, ...]:
        """Read-only view of the current history.

        Order is not meaningful; consumers sort by occurred_at when needed.
        """
        return tuple(self._doses)

    def trim(self, now: Optional[datetime] = None) -> None:
        """Drop doses older than the retention window and persist.

        Args:
            now: Reference time (defaults to the ledger clock)
        """
        self._doses = self._retained(self._doses, now if now is not None else self.clock())
        self._save()

    def _retained(self, doses: List[Dose], now: datetime) -> List[Dose]:
        cutoff = now - self.retention
        kept = [dose for dose in doses if dose.occurred_at >= cutoff]
        removed = len(doses) - len(kept)
        if removed:
            logger.debug("Trimmed %d doses older than %s", removed, cutoff.isoformat())
        return kept

    def _load(self) -> List[Dose]:
        raw = self.gateway.get(HISTORY_KEY)
        if raw is None:
            return []
        try:
            return decode_doses(raw)
        except DeserializationError as e:
            logger.warning("Discarding unreadable dose history: %s", e)
            return []

    def _save(self) -> None:
        try:
            payload = encode_doses(self._doses)
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning("Dose history not persisted: %s", e)
            return
        self.gateway.set(HISTORY_KEY, payload)


class FavoritesRegistry:
    """Collection of favorite beverages, keyed by beverage name.

    Two catalog entries with the same name count as the same favorite.
    """

    def __init__(self, gateway: StorageGateway):
        self.gateway = gateway
        self._favorites: List[Beverage] = self._load()

    def favorites(self) -> Tuple[Beverage, ...]:
        """Favorites in the order they were added."""
        return tuple(self._favorites)

    def is_favorite(self, beverage: Beverage) -> bool:
        return any(favorite.name == beverage.name for favorite in self._favorites)

    def toggle_favorite(self, beverage: Beverage) -> bool:
        """Add the beverage if absent, remove it if present, then persist.

        Returns:
            True if the beverage is a favorite after the call
        """
        for index, favorite in enumerate(self._favorites):
            if favorite.name == beverage.name:
                del self._favorites[index]
                logger.debug("Removed favorite %s", beverage.name)
                self._save()
                return False

        self._favorites.append(beverage)
        logger.debug("Added favorite %s", beverage.name)
        self._save()
        return True

    def _load(self) -> List[Beverage]:
        raw = self.gateway.get(FAVORITES_KEY)
        if raw is None:
            return []
        try:
            return decode_beverages(raw)
        except DeserializationError as e:
            logger.warning("Discarding unreadable favorites: %s", e)
            return []

    def _save(self) -> None:
        try:
            payload = encode_beverages(self._favorites)
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning("Favorites not persisted: %s", e)
            return
        self.gateway.set(FAVORITES_KEY, payload)
