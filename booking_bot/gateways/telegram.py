"""
Telegram Bot API gateway.

Minimal client wrapper over the Bot API HTTP interface:
- outbound: sendMessage with reply/inline keyboards, answerCallbackQuery
- inbound: long polling getUpdates, converted to chat events by parse_update

Keep the token out of logs; it is part of every request URL.
"""

import logging
import threading
import time
from typing import Any, Callable, Optional

import httpx

from booking_bot.gateways.base import ButtonRows, Menu
from booking_bot.prompts.messages import LABEL_SEND_CONTACT
from booking_bot.schemas.event_schema import (
    ButtonEvent,
    ContactEvent,
    InboundEvent,
    TextEvent,
)

logger = logging.getLogger(__name__)

RETRY_DELAY_SECONDS = 3.0


class TelegramApiError(Exception):
    """The Bot API answered with ``ok: false``."""


def parse_update(update: dict[str, Any]) -> Optional[InboundEvent]:
    """Convert a raw Bot API update into an inbound event, or None if irrelevant."""
    message = update.get("message")
    if message is not None:
        chat_id = message["chat"]["id"]
        contact = message.get("contact")
        if contact is not None:
            return ContactEvent(owner_id=chat_id, phone_number=contact.get("phone_number", ""))
        if "text" in message:
            return TextEvent(owner_id=chat_id, text=message["text"])
        return None

    query = update.get("callback_query")
    if query is not None:
        source = query.get("message") or {}
        chat_id = source.get("chat", {}).get("id", query["from"]["id"])
        return ButtonEvent(
            owner_id=chat_id,
            payload=query.get("data", ""),
            callback_id=query["id"],
        )
    return None


def _reply_keyboard(menu: Menu, one_time: bool = False) -> dict[str, Any]:
    return {
        "keyboard": [[{"text": label} for label in row] for row in menu],
        "resize_keyboard": True,
        "one_time_keyboard": one_time,
    }


def _inline_keyboard(buttons: ButtonRows) -> dict[str, Any]:
    return {
        "inline_keyboard": [
            [{"text": b.label, "callback_data": b.payload} for b in row] for row in buttons
        ]
    }


class TelegramGateway:
    """Synchronous Bot API client implementing MessagingGateway."""

    def __init__(
        self,
        token: str,
        *,
        base_url: str = "https://api.telegram.org",
        poll_timeout: int = 60,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._base = f"{base_url.rstrip('/')}/bot{token}"
        self._poll_timeout = poll_timeout
        self._client = client or httpx.Client(timeout=poll_timeout + 10)

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------ #
    # Outbound
    # ------------------------------------------------------------------ #

    def send_text(
        self,
        owner_id: int,
        text: str,
        menu: Optional[Menu] = None,
        hide_menu: bool = False,
    ) -> None:
        payload: dict[str, Any] = {"chat_id": owner_id, "text": text}
        if menu is not None:
            payload["reply_markup"] = _reply_keyboard(menu)
        elif hide_menu:
            payload["reply_markup"] = {"remove_keyboard": True}
        self._send("sendMessage", payload)

    def send_choice_prompt(self, owner_id: int, text: str, buttons: ButtonRows) -> None:
        self._send(
            "sendMessage",
            {"chat_id": owner_id, "text": text, "reply_markup": _inline_keyboard(buttons)},
        )

    def request_contact(self, owner_id: int, prompt: str) -> None:
        keyboard = {
            "keyboard": [[{"text": LABEL_SEND_CONTACT, "request_contact": True}]],
            "resize_keyboard": True,
            "one_time_keyboard": True,
        }
        self._send("sendMessage", {"chat_id": owner_id, "text": prompt, "reply_markup": keyboard})

    def answer_callback(self, callback_id: str) -> None:
        if not callback_id:
            return
        self._send("answerCallbackQuery", {"callback_query_id": callback_id})

    # ------------------------------------------------------------------ #
    # Inbound
    # ------------------------------------------------------------------ #

    def delete_webhook(self) -> None:
        """Polling and webhooks are exclusive; drop any webhook left behind."""
        self._send("deleteWebhook", {})

    def get_updates(self, offset: int) -> list[dict[str, Any]]:
        return self._call(
            "getUpdates",
            {"offset": offset, "timeout": self._poll_timeout, "allowed_updates": ["message", "callback_query"]},
        )

    def poll(
        self,
        handler: Callable[[InboundEvent], None],
        stop: Optional[threading.Event] = None,
    ) -> None:
        """Long-poll for updates and hand each event to ``handler`` in arrival order."""
        offset = 0
        while stop is None or not stop.is_set():
            try:
                updates = self.get_updates(offset)
            except (httpx.HTTPError, TelegramApiError) as exc:
                logger.warning("getUpdates failed, retrying in %.0fs: %s", RETRY_DELAY_SECONDS, exc)
                time.sleep(RETRY_DELAY_SECONDS)
                continue

            for update in updates:
                offset = max(offset, update["update_id"] + 1)
                event = parse_update(update)
                if event is None:
                    continue
                try:
                    handler(event)
                except Exception:
                    logger.exception("Failed to handle update %s", update["update_id"])

    # ------------------------------------------------------------------ #
    # HTTP
    # ------------------------------------------------------------------ #

    def _call(self, method: str, payload: dict[str, Any]) -> Any:
        r = self._client.post(f"{self._base}/{method}", json=payload)
        r.raise_for_status()
        data = r.json()
        if not data.get("ok"):
            raise TelegramApiError(f"{method}: {data.get('description', 'unknown error')}")
        return data.get("result")

    def _send(self, method: str, payload: dict[str, Any]) -> None:
        try:
            self._call(method, payload)
        except (httpx.HTTPError, TelegramApiError) as exc:
            logger.error("Telegram %s failed: %s", method, exc)
