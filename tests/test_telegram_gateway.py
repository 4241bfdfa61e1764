"""Tests for the Telegram Bot API gateway using a mocked HTTP transport."""

import json
import threading

import httpx
import pytest

from booking_bot.gateways.base import Button
from booking_bot.gateways.telegram import TelegramApiError, TelegramGateway, parse_update
from booking_bot.schemas.event_schema import ButtonEvent, ContactEvent, TextEvent

BASE = "https://api.test"
TOKEN = "123:abc"


class RecordingTransport:
    """Answers every Bot API call with ``ok: true`` and records the request."""

    def __init__(self, results=None):
        self.requests: list[tuple[str, dict]] = []
        self.results = results or {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        self.requests.append((method, json.loads(request.content or b"{}")))
        result = self.results.get(method, True)
        if callable(result):
            result = result()
        return httpx.Response(200, json={"ok": True, "result": result})


def make_gateway(handler) -> TelegramGateway:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return TelegramGateway(TOKEN, base_url=BASE, poll_timeout=1, client=client)


class TestParseUpdate:
    def test_text_message(self):
        event = parse_update({"update_id": 1, "message": {"chat": {"id": 42}, "text": "Ivan"}})
        assert event == TextEvent(owner_id=42, text="Ivan")

    def test_contact_message(self):
        update = {
            "update_id": 2,
            "message": {
                "chat": {"id": 42},
                "contact": {"phone_number": "+79112223344", "first_name": "Ivan"},
            },
        }
        event = parse_update(update)
        assert isinstance(event, ContactEvent)
        assert event.phone_number == "+79112223344"

    def test_callback_query(self):
        update = {
            "update_id": 3,
            "callback_query": {
                "id": "cb-1",
                "from": {"id": 7},
                "message": {"chat": {"id": 42}},
                "data": "date_16.03.2025",
            },
        }
        assert parse_update(update) == ButtonEvent(
            owner_id=42, payload="date_16.03.2025", callback_id="cb-1"
        )

    def test_callback_without_message_uses_sender(self):
        update = {"update_id": 4, "callback_query": {"id": "cb-2", "from": {"id": 7}, "data": "cancel"}}
        assert parse_update(update).owner_id == 7

    def test_irrelevant_updates(self):
        assert parse_update({"update_id": 5, "message": {"chat": {"id": 42}, "sticker": {}}}) is None
        assert parse_update({"update_id": 6, "edited_message": {}}) is None


class TestOutbound:
    def test_send_text_with_menu(self):
        transport = RecordingTransport()
        make_gateway(transport).send_text(42, "Choose an action:", menu=[["Book a table", "Contact us"]])
        method, body = transport.requests[0]
        assert method == "sendMessage"
        assert body["chat_id"] == 42
        assert body["reply_markup"]["keyboard"] == [[{"text": "Book a table"}, {"text": "Contact us"}]]

    def test_send_text_hides_menu(self):
        transport = RecordingTransport()
        make_gateway(transport).send_text(42, "Please enter your name:", hide_menu=True)
        assert transport.requests[0][1]["reply_markup"] == {"remove_keyboard": True}

    def test_plain_text_has_no_markup(self):
        transport = RecordingTransport()
        make_gateway(transport).send_text(42, "hi")
        assert "reply_markup" not in transport.requests[0][1]

    def test_choice_prompt_uses_inline_keyboard(self):
        transport = RecordingTransport()
        make_gateway(transport).send_choice_prompt(42, "Pick", [[Button("16:00", "time_16:00")]])
        markup = transport.requests[0][1]["reply_markup"]
        assert markup == {"inline_keyboard": [[{"text": "16:00", "callback_data": "time_16:00"}]]}

    def test_request_contact(self):
        transport = RecordingTransport()
        make_gateway(transport).request_contact(42, "Share")
        keyboard = transport.requests[0][1]["reply_markup"]["keyboard"]
        assert keyboard[0][0]["request_contact"] is True

    def test_answer_callback(self):
        transport = RecordingTransport()
        gateway = make_gateway(transport)
        gateway.answer_callback("")
        gateway.answer_callback("cb-1")
        assert transport.requests == [("answerCallbackQuery", {"callback_query_id": "cb-1"})]

    def test_token_in_url(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, json={"ok": True, "result": True})

        make_gateway(handler).delete_webhook()
        assert seen == [f"{BASE}/bot{TOKEN}/deleteWebhook"]

    def test_api_error_is_logged_not_raised(self, caplog):
        def handler(request):
            return httpx.Response(200, json={"ok": False, "description": "chat not found"})

        make_gateway(handler).send_text(42, "hi")
        assert "chat not found" in caplog.text

    def test_http_error_is_logged_not_raised(self, caplog):
        def handler(request):
            return httpx.Response(502)

        make_gateway(handler).send_text(42, "hi")
        assert "sendMessage failed" in caplog.text


class TestPolling:
    def test_get_updates_raises_on_api_error(self):
        def handler(request):
            return httpx.Response(200, json={"ok": False, "description": "Conflict"})

        with pytest.raises(TelegramApiError):
            make_gateway(handler).get_updates(0)

    def test_poll_dispatches_and_advances_offset(self):
        stop = threading.Event()
        batches = [
            [
                {"update_id": 10, "message": {"chat": {"id": 42}, "text": "/start"}},
                {"update_id": 11, "message": {"chat": {"id": 42}, "sticker": {}}},
            ],
        ]

        def next_batch():
            if batches:
                return batches.pop(0)
            stop.set()
            return []

        transport = RecordingTransport(results={"getUpdates": next_batch})
        received = []
        make_gateway(transport).poll(received.append, stop=stop)

        assert received == [TextEvent(owner_id=42, text="/start")]
        offsets = [body["offset"] for method, body in transport.requests if method == "getUpdates"]
        assert offsets == [0, 12]

    def test_handler_failure_does_not_stop_polling(self, caplog):
        stop = threading.Event()
        batches = [
            [{"update_id": 1, "message": {"chat": {"id": 42}, "text": "boom"}}],
            [{"update_id": 2, "message": {"chat": {"id": 42}, "text": "ok"}}],
        ]

        def next_batch():
            if batches:
                return batches.pop(0)
            stop.set()
            return []

        handled = []

        def handler(event):
            if event.text == "boom":
                raise RuntimeError("handler broke")
            handled.append(event.text)

        make_gateway(RecordingTransport(results={"getUpdates": next_batch})).poll(handler, stop=stop)
        assert handled == ["ok"]
        assert "Failed to handle update 1" in caplog.text
