"""Shared test fixtures and helpers."""

from datetime import datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from booking_bot.clock import Clock
from booking_bot.conversation.offers import OfferPolicy
from booking_bot.conversation.state_machine import ConversationStateMachine
from booking_bot.conversation.state_repository import InMemoryConversationStateRepository
from booking_bot.gateways.base import ButtonRows, Menu
from booking_bot.orchestrator import DialogueOrchestrator
from booking_bot.schemas.reservation_schema import Reservation
from booking_bot.storage.csv_file import ReservationCsvFile
from booking_bot.storage.reservation_store import ReservationStore
from booking_bot.tools.notifications import AdminNotifier

MOSCOW = ZoneInfo("Europe/Moscow")
TTL = timedelta(minutes=15)
ADMIN_CHAT_ID = 999
MANAGER_PHONE = "+7 495 000-00-00"


class FrozenClock(Clock):
    """Clock whose current time is set by the test."""

    def __init__(self, now: datetime) -> None:
        super().__init__("Europe/Moscow")
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


class FakeGateway:
    """Records every outbound call in order."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.callbacks: list[str] = []

    def send_text(
        self,
        owner_id: int,
        text: str,
        menu: Optional[Menu] = None,
        hide_menu: bool = False,
    ) -> None:
        self.calls.append(("text", owner_id, text, menu, hide_menu))

    def send_choice_prompt(self, owner_id: int, text: str, buttons: ButtonRows) -> None:
        self.calls.append(("choice", owner_id, text, buttons))

    def request_contact(self, owner_id: int, prompt: str) -> None:
        self.calls.append(("contact", owner_id, prompt))

    def answer_callback(self, callback_id: str) -> None:
        self.callbacks.append(callback_id)

    # --- helpers ---

    def texts(self, owner_id: Optional[int] = None) -> list[str]:
        return [
            c[2] for c in self.calls
            if c[0] in ("text", "choice") and (owner_id is None or c[1] == owner_id)
        ]

    def last(self) -> tuple:
        return self.calls[-1]

    def last_menu(self, owner_id: int) -> Optional[Menu]:
        for call in reversed(self.calls):
            if call[0] == "text" and call[1] == owner_id and call[3] is not None:
                return call[3]
        return None

    def last_buttons(self, owner_id: int) -> ButtonRows:
        for call in reversed(self.calls):
            if call[0] == "choice" and call[1] == owner_id:
                return call[3]
        return []

    def payloads(self, owner_id: int) -> list[str]:
        return [b.payload for row in self.last_buttons(owner_id) for b in row]

    def clear(self) -> None:
        self.calls.clear()
        self.callbacks.clear()


def moscow(year, month, day, hour=0, minute=0, second=0) -> datetime:
    return datetime(year, month, day, hour, minute, second, tzinfo=MOSCOW)


def make_reservation(
    reservation_id: str = "42-1",
    owner_id: int = 42,
    name: str = "Ivan",
    phone: str = "79112223344",
    guests: int = 2,
    date: str = "16.03.2025",
    time: str = "19:00",
    comment: str = "-",
    confirmed: bool = True,
    created_at: Optional[datetime] = None,
) -> Reservation:
    """Helper to create a Reservation with sensible defaults."""
    return Reservation(
        id=reservation_id,
        owner_id=owner_id,
        name=name,
        phone=phone,
        guests=guests,
        date=date,
        time=time,
        comment=comment,
        confirmed=confirmed,
        created_at=created_at or datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def clock():
    return FrozenClock(moscow(2025, 3, 15, 18, 10))


@pytest.fixture
def csv_path(tmp_path):
    return tmp_path / "reservations.csv"


@pytest.fixture
def csv_file(csv_path):
    return ReservationCsvFile(csv_path)


@pytest.fixture
def store(csv_file, clock):
    store = ReservationStore(csv_file, clock, TTL)
    store.load()
    return store


@pytest.fixture
def policy():
    return OfferPolicy()


@pytest.fixture
def state_machine(clock, policy):
    return ConversationStateMachine(clock, policy)


@pytest.fixture
def states():
    return InMemoryConversationStateRepository()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def orchestrator(gateway, store, states, state_machine, clock):
    return DialogueOrchestrator(
        gateway=gateway,
        store=store,
        states=states,
        machine=state_machine,
        notifier=AdminNotifier(gateway, ADMIN_CHAT_ID),
        clock=clock,
        manager_phone=MANAGER_PHONE,
    )
