"""Copies of booking events sent to the restaurant's admin chat."""

import logging

from booking_bot.gateways.base import MessagingGateway
from booking_bot.schemas.reservation_schema import Reservation

logger = logging.getLogger(__name__)


class AdminNotifier:
    """Fire-and-forget notifications. A chat ID of 0 disables them."""

    def __init__(self, gateway: MessagingGateway, admin_chat_id: int) -> None:
        self._gateway = gateway
        self._admin_chat_id = admin_chat_id

    @property
    def enabled(self) -> bool:
        return self._admin_chat_id != 0

    def reservation_created(self, reservation: Reservation) -> None:
        self._send(
            f"New reservation #{reservation.id}!\n"
            f"{reservation.summary(always_comment=True)}"
        )

    def reservation_edited(self, reservation: Reservation) -> None:
        self._send(
            f"✏️ Reservation #{reservation.id} edited!\n"
            f"{reservation.summary(always_comment=True)}"
        )

    def reservation_deleted(self, reservation: Reservation) -> None:
        self._send(f"❌ Reservation #{reservation.id} deleted!\n{reservation.summary()}")

    def _send(self, text: str) -> None:
        if not self.enabled:
            return
        try:
            self._gateway.send_text(self._admin_chat_id, text)
        except Exception as exc:
            logger.warning("Admin notification failed: %s", exc)
