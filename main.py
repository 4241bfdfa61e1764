"""
Table booking bot entry point.

Loads reservations, starts the expiry sweeper and serves the Telegram
long-polling loop. Console mode runs the same dialogue in the terminal
with no bot token or network access.

Usage:
    Telegram:     python main.py
    Console mode: python main.py console
"""

import logging
import sys

from booking_bot.config import require_bot_token, settings

logger = logging.getLogger(__name__)


def _run_telegram_mode() -> None:
    """Serve the bot over the Telegram Bot API (requires TELEGRAM_BOT_TOKEN)."""
    from booking_bot.app import build_app
    from booking_bot.gateways.telegram import TelegramGateway

    try:
        token = require_bot_token(settings)
    except ValueError as exc:
        logger.critical("%s", exc)
        sys.exit(1)

    gateway = TelegramGateway(
        token,
        base_url=settings.bot.api_url,
        poll_timeout=settings.bot.poll_timeout_seconds,
    )
    app = build_app(settings, gateway)
    gateway.delete_webhook()
    app.sweeper.start()
    logger.info("Polling for updates")
    try:
        gateway.poll(app.orchestrator.handle_event)
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        app.sweeper.stop(timeout=5)
        gateway.close()


def _run_console_mode() -> None:
    """Start the offline console demo (no bot token required)."""
    from console_demo import ConsoleSession

    session = ConsoleSession()
    session.run()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    else:
        _run_telegram_mode()
