"""Wires configuration, storage, dialogue and the expiry sweeper together."""

import logging
from dataclasses import dataclass
from datetime import timedelta

from booking_bot.clock import Clock
from booking_bot.config import AppConfig
from booking_bot.conversation.offers import OfferPolicy
from booking_bot.conversation.state_machine import ConversationStateMachine
from booking_bot.conversation.state_repository import InMemoryConversationStateRepository
from booking_bot.gateways.base import MessagingGateway
from booking_bot.orchestrator import DialogueOrchestrator
from booking_bot.storage.csv_file import ReservationCsvFile
from booking_bot.storage.reservation_store import ReservationStore
from booking_bot.tools.expiry import ExpirySweeper
from booking_bot.tools.notifications import AdminNotifier

logger = logging.getLogger(__name__)


@dataclass
class BookingApp:
    """Process-lifetime components shared by the transport loop."""
    clock: Clock
    store: ReservationStore
    states: InMemoryConversationStateRepository
    orchestrator: DialogueOrchestrator
    sweeper: ExpirySweeper


def build_app(config: AppConfig, gateway: MessagingGateway) -> BookingApp:
    """Build every component and load reservations from durable storage."""
    clock = Clock(config.booking.time_zone)
    ttl = timedelta(minutes=config.booking.reservation_ttl_minutes)

    store = ReservationStore(ReservationCsvFile(config.storage.reservations_file), clock, ttl)
    store.load()

    states = InMemoryConversationStateRepository()
    machine = ConversationStateMachine(clock, OfferPolicy.from_config(config.booking))
    orchestrator = DialogueOrchestrator(
        gateway=gateway,
        store=store,
        states=states,
        machine=machine,
        notifier=AdminNotifier(gateway, config.bot.admin_chat_id),
        clock=clock,
        manager_phone=config.bot.manager_phone,
    )
    sweeper = ExpirySweeper(
        store,
        now=clock.now,
        tz=clock.tz,
        ttl=ttl,
        interval_seconds=config.storage.sweep_interval_seconds,
    )
    logger.info("Booking app ready (%d reservations, TTL %s)", len(store), ttl)
    return BookingApp(clock, store, states, orchestrator, sweeper)
