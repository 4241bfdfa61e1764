"""
Background eviction of reservations whose time window has passed.

``sweep`` is a pure pass over the store; ``ExpirySweeper`` runs it on a
fixed interval in a daemon thread until stopped.
"""

import logging
import threading
from datetime import datetime, timedelta, tzinfo
from typing import Callable, Optional

from booking_bot.storage.reservation_store import ReservationRepository

logger = logging.getLogger(__name__)


def sweep(
    now: datetime,
    store: ReservationRepository,
    tz: tzinfo,
    ttl: timedelta,
) -> list[str]:
    """Delete every reservation with ``now >= booked time + ttl``.

    Reservations whose date or time cannot be parsed are left in place.

    Returns:
        IDs of the evicted reservations.
    """
    evicted = []
    for reservation in store.all():
        if reservation.instant(tz) is None:
            logger.debug("Skipping reservation %s with unparsable date/time", reservation.id)
            continue
        if not reservation.is_expired(now, tz, ttl):
            continue
        if store.delete_if_expired(reservation.id, now, tz, ttl) is None:
            logger.debug("Reservation %s changed before eviction, kept", reservation.id)
            continue
        evicted.append(reservation.id)
        logger.info("Reservation %s removed (expired)", reservation.id)
    return evicted


class ExpirySweeper:
    """Runs ``sweep`` immediately and then every ``interval_seconds``."""

    def __init__(
        self,
        store: ReservationRepository,
        now: Callable[[], datetime],
        tz: tzinfo,
        ttl: timedelta,
        interval_seconds: float = 300,
    ) -> None:
        self._store = store
        self._now = now
        self._tz = tz
        self._ttl = ttl
        self._interval = interval_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def run_once(self) -> list[str]:
        return sweep(self._now(), self._store, self._tz, self._ttl)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="expiry-sweeper", daemon=True)
        self._thread.start()
        logger.info("Expiry sweeper started (every %ss)", self._interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.run_once()
            except Exception:
                logger.exception("Expiry sweep failed")
            self._stop.wait(self._interval)
