"""Tests for expiry sweeping."""

import threading

from booking_bot.storage.reservation_store import ReservationStore
from booking_bot.tools.expiry import ExpirySweeper, sweep

from tests.conftest import MOSCOW, TTL, make_reservation, moscow


class EditDuringSnapshotStore(ReservationStore):
    """Applies a pending update right after the sweep takes its snapshot."""

    pending = None

    def all(self):
        snapshot = super().all()
        if self.pending is not None:
            self.update(self.pending)
            self.pending = None
        return snapshot


class TestSweep:
    def test_evicts_once_ttl_has_passed(self, store):
        store.create(make_reservation("42-1", date="15.03.2025", time="20:00"))
        evicted = sweep(moscow(2025, 3, 15, 20, 15, 1), store, MOSCOW, TTL)
        assert evicted == ["42-1"]
        assert store.get("42-1") is None

    def test_evicts_exactly_at_boundary(self, store):
        store.create(make_reservation("42-1", date="15.03.2025", time="20:00"))
        assert sweep(moscow(2025, 3, 15, 20, 15), store, MOSCOW, TTL) == ["42-1"]

    def test_keeps_reservation_inside_window(self, store):
        store.create(make_reservation("42-1", date="15.03.2025", time="20:00"))
        assert sweep(moscow(2025, 3, 15, 20, 14, 59), store, MOSCOW, TTL) == []
        assert store.get("42-1") is not None

    def test_unparsable_entries_are_kept(self, store):
        store.create(make_reservation("42-1", date="31.02.2025"))
        store.create(make_reservation("42-2", time="late"))
        assert sweep(moscow(2030, 1, 1), store, MOSCOW, TTL) == []
        assert len(store) == 2

    def test_eviction_is_persisted(self, store, csv_file):
        store.create(make_reservation("42-1", date="15.03.2025", time="12:00"))
        store.create(make_reservation("42-2", date="16.03.2025", time="12:00"))
        sweep(moscow(2025, 3, 15, 18, 10), store, MOSCOW, TTL)
        assert [row[0] for row in csv_file.read_rows()] == ["42-2"]

    def test_update_after_snapshot_is_not_evicted(self, csv_file, clock):
        store = EditDuringSnapshotStore(csv_file, clock, TTL)
        store.load()
        store.create(make_reservation("42-1", date="15.03.2025", time="12:00"))
        store.pending = make_reservation("42-1", date="16.03.2025", time="21:00")

        assert sweep(moscow(2025, 3, 15, 18, 10), store, MOSCOW, TTL) == []

        kept = store.get("42-1")
        assert (kept.date, kept.time) == ("16.03.2025", "21:00")
        assert [row[0] for row in csv_file.read_rows()] == ["42-1"]


class TestDeleteIfExpired:
    def test_removes_expired_entry(self, store, csv_file):
        store.create(make_reservation("42-1", date="15.03.2025", time="12:00"))
        removed = store.delete_if_expired("42-1", moscow(2025, 3, 15, 18, 10), MOSCOW, TTL)
        assert removed.id == "42-1"
        assert csv_file.read_rows() == []

    def test_keeps_current_entry(self, store):
        store.create(make_reservation("42-1", date="16.03.2025"))
        assert store.delete_if_expired("42-1", moscow(2025, 3, 15, 18, 10), MOSCOW, TTL) is None
        assert store.get("42-1") is not None

    def test_unknown_id(self, store):
        assert store.delete_if_expired("nope", moscow(2025, 3, 15, 18, 10), MOSCOW, TTL) is None


class TestExpirySweeper:
    def test_run_once_uses_clock(self, store, clock):
        store.create(make_reservation("42-1", date="15.03.2025", time="17:00"))
        sweeper = ExpirySweeper(store, now=clock.now, tz=MOSCOW, ttl=TTL)
        assert sweeper.run_once() == ["42-1"]

    def test_first_pass_runs_on_start(self, store, clock):
        store.create(make_reservation("42-1", date="15.03.2025", time="17:00"))
        swept = threading.Event()

        def now():
            swept.set()
            return clock.now()

        sweeper = ExpirySweeper(store, now=now, tz=MOSCOW, ttl=TTL, interval_seconds=3600)
        sweeper.start()
        try:
            assert swept.wait(timeout=5)
        finally:
            sweeper.stop(timeout=5)
        assert not sweeper.running
        assert store.get("42-1") is None

    def test_failing_pass_does_not_kill_thread(self, store):
        calls = []
        second_call = threading.Event()

        def now():
            calls.append(1)
            if len(calls) >= 2:
                second_call.set()
            raise RuntimeError("clock broke")

        sweeper = ExpirySweeper(store, now=now, tz=MOSCOW, ttl=TTL, interval_seconds=0.01)
        sweeper.start()
        try:
            assert second_call.wait(timeout=5)
            assert sweeper.running
        finally:
            sweeper.stop(timeout=5)

    def test_stop_without_start(self, store, clock):
        ExpirySweeper(store, now=clock.now, tz=MOSCOW, ttl=TTL).stop()
