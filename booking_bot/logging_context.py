"""Chat ID logging context for tracing one user's dialogue across modules.

Provides a chat_id-aware logger that attaches the owning chat ID to every
log message, making it easy to follow a single guest's booking dialogue
through the orchestrator, state machine and store.

Usage:
    from booking_bot.logging_context import get_chat_logger, set_chat_id

    set_chat_id(123456789)
    logger = get_chat_logger(__name__)
    logger.info("Processing update")  # → [chat=123456789] Processing update
"""

import logging
from contextvars import ContextVar
from typing import Union

_chat_id: ContextVar[str] = ContextVar("chat_id", default="-")


def set_chat_id(chat_id: Union[int, str]) -> None:
    """Set the chat ID for the current context."""
    _chat_id.set(str(chat_id))


def get_chat_id() -> str:
    """Retrieve the current chat ID."""
    return _chat_id.get()


def clear_chat_id() -> None:
    _chat_id.set("-")


class ChatIdFilter(logging.Filter):
    """Injects chat_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.chat_id = _chat_id.get()  # type: ignore[attr-defined]
        return True


def install_chat_id_filter() -> None:
    """Attach the filter to the root handlers so every record carries ``chat_id``."""
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, ChatIdFilter) for f in handler.filters):
            handler.addFilter(ChatIdFilter())


def get_chat_logger(name: str) -> logging.Logger:
    """Return a logger with the ChatIdFilter attached.

    The filter adds ``chat_id`` to each record so formatters can
    include ``%(chat_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, ChatIdFilter) for f in logger.filters):
        logger.addFilter(ChatIdFilter())
    return logger
