"""
In-memory reservation store mirrored to the reservations CSV.

The in-memory map is the source of truth for the running process. Every
mutation is written through to durable storage before returning; a write
failure is logged and does not roll back memory.

Usage:
    store = ReservationStore(ReservationCsvFile("reservations.csv"), clock, ttl)
    store.load()
    store.create(reservation)
    store.get_active_for_owner(chat_id)
"""

import logging
import threading
from datetime import datetime, timedelta, tzinfo
from typing import Optional, Protocol

from booking_bot.clock import Clock
from booking_bot.schemas.reservation_schema import Reservation
from booking_bot.storage.csv_file import ReservationCsvFile, StorageError

logger = logging.getLogger(__name__)


class ReservationRepository(Protocol):
    """Operations the dialogue and the sweeper need from a reservation store."""

    def create(self, reservation: Reservation) -> None: ...

    def get(self, reservation_id: str) -> Optional[Reservation]: ...

    def get_active_for_owner(self, owner_id: int) -> list[Reservation]: ...

    def has_active_for_owner(self, owner_id: int) -> bool: ...

    def update(self, reservation: Reservation) -> bool: ...

    def delete(self, reservation_id: str) -> Optional[Reservation]: ...

    def delete_if_expired(
        self, reservation_id: str, now: datetime, tz: tzinfo, ttl: timedelta
    ) -> Optional[Reservation]: ...

    def all(self) -> list[Reservation]: ...


class ReservationStore:
    """Thread-safe reservation map with write-through CSV persistence."""

    def __init__(self, storage: ReservationCsvFile, clock: Clock, ttl: timedelta) -> None:
        self._storage = storage
        self._clock = clock
        self._ttl = ttl
        self._reservations: dict[str, Reservation] = {}
        self._lock = threading.RLock()

    def load(self) -> int:
        """Replace memory with the contents of durable storage.

        Returns:
            The number of reservations loaded.
        """
        try:
            self._storage.ensure_exists()
            loaded = list(self._storage.iter_reservations())
        except StorageError as exc:
            logger.error("Could not load reservations: %s", exc)
            loaded = []

        with self._lock:
            self._reservations = {r.id: r for r in loaded}
        for r in loaded:
            logger.debug("Loaded reservation ID=%s, name=%r", r.id, r.name)
        logger.info("Loaded %d reservations from %s", len(loaded), self._storage.path)
        return len(loaded)

    def create(self, reservation: Reservation) -> None:
        with self._lock:
            self._reservations[reservation.id] = reservation.model_copy()
            self._persist(self._storage.append, reservation)
        logger.info("Reservation created: ID=%s, name=%r", reservation.id, reservation.name)

    def get(self, reservation_id: str) -> Optional[Reservation]:
        with self._lock:
            found = self._reservations.get(reservation_id)
            return found.model_copy() if found else None

    def get_active_for_owner(self, owner_id: int) -> list[Reservation]:
        now = self._clock.now()
        with self._lock:
            return [
                r.model_copy()
                for r in self._reservations.values()
                if r.owner_id == owner_id and r.is_active(now, self._clock.tz, self._ttl)
            ]

    def has_active_for_owner(self, owner_id: int) -> bool:
        now = self._clock.now()
        with self._lock:
            return any(
                r.owner_id == owner_id and r.is_active(now, self._clock.tz, self._ttl)
                for r in self._reservations.values()
            )

    def update(self, reservation: Reservation) -> bool:
        """Overwrite the stored reservation with the same ID.

        Returns:
            False if no reservation with that ID exists any more.
        """
        with self._lock:
            if reservation.id not in self._reservations:
                logger.warning("Update skipped, reservation %s no longer exists", reservation.id)
                return False
            self._reservations[reservation.id] = reservation.model_copy()
            self._persist(self._storage.replace_row, reservation)
        logger.info("Reservation updated: ID=%s", reservation.id)
        return True

    def delete(self, reservation_id: str) -> Optional[Reservation]:
        """Remove a reservation. Deleting an unknown ID is a no-op.

        Returns:
            The removed reservation, or None if it was not present.
        """
        with self._lock:
            removed = self._reservations.pop(reservation_id, None)
            self._persist(self._storage.remove_row, reservation_id)
        if removed is not None:
            logger.info("Reservation deleted: ID=%s", reservation_id)
        return removed

    def delete_if_expired(
        self, reservation_id: str, now: datetime, tz: tzinfo, ttl: timedelta
    ) -> Optional[Reservation]:
        """Remove a reservation only if its current version has expired.

        The check and the removal are atomic with respect to other mutations.
        """
        with self._lock:
            current = self._reservations.get(reservation_id)
            if current is None or not current.is_expired(now, tz, ttl):
                return None
            del self._reservations[reservation_id]
            self._persist(self._storage.remove_row, reservation_id)
        return current

    def all(self) -> list[Reservation]:
        """Snapshot of every stored reservation."""
        with self._lock:
            return [r.model_copy() for r in self._reservations.values()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._reservations)

    def _persist(self, operation, argument) -> None:
        try:
            operation(argument)
        except StorageError as exc:
            logger.error("Durable write failed, keeping in-memory state: %s", exc)
