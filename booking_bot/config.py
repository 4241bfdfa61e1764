"""
Centralized configuration with environment variable overrides.

Restaurant-specific values, booking rules and storage locations are
configurable here. Nothing is hardcoded in dialogue or store logic.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from booking_bot.logging_context import install_chat_id_filter

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class BotConfig:
    """Chat transport credentials and the admin channel."""

    token: str = os.getenv("TELEGRAM_BOT_TOKEN", "")
    api_url: str = os.getenv("TELEGRAM_API_URL", "https://api.telegram.org")
    poll_timeout_seconds: int = _safe_int("POLL_TIMEOUT_SECONDS", "60")
    admin_chat_id: int = _safe_int("ADMIN_CHAT_ID", "0")
    manager_phone: str = os.getenv("MANAGER_PHONE", "+7 000 000-00-00")


@dataclass(frozen=True)
class BookingConfig:
    """Booking rules: time zone, lead time, expiry and the slot grid."""

    time_zone: str = os.getenv("TIME_ZONE", "Europe/Moscow")
    min_booking_hours: int = _safe_int("MIN_BOOKING_HOURS", "2")
    reservation_ttl_minutes: int = _safe_int("RESERVATION_TTL_MINUTES", "15")
    offered_days: int = _safe_int("OFFERED_DAYS", "10")
    first_slot_hour: int = _safe_int("FIRST_SLOT_HOUR", "16")
    last_slot_hour: int = _safe_int("LAST_SLOT_HOUR", "23")
    slot_step_minutes: int = _safe_int("SLOT_STEP_MINUTES", "30")


@dataclass(frozen=True)
class StorageConfig:
    """Durable storage location and the expiry sweep cadence."""

    reservations_file: str = os.getenv("RESERVATIONS_FILE", "reservations.csv")
    sweep_interval_seconds: int = _safe_int("SWEEP_INTERVAL_SECONDS", "300")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    bot: BotConfig = field(default_factory=BotConfig)
    booking: BookingConfig = field(default_factory=BookingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "table-booking-bot")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    try:
        ZoneInfo(config.booking.time_zone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"TIME_ZONE is not a known zone: {config.booking.time_zone!r}") from None

    if config.booking.min_booking_hours < 0:
        raise ValueError(
            f"MIN_BOOKING_HOURS must be >= 0, got {config.booking.min_booking_hours}"
        )
    if config.booking.reservation_ttl_minutes < 0:
        raise ValueError(
            "RESERVATION_TTL_MINUTES must be >= 0, "
            f"got {config.booking.reservation_ttl_minutes}"
        )
    if config.booking.offered_days < 1:
        raise ValueError(f"OFFERED_DAYS must be >= 1, got {config.booking.offered_days}")

    for hour_name, hour_value in [
        ("FIRST_SLOT_HOUR", config.booking.first_slot_hour),
        ("LAST_SLOT_HOUR", config.booking.last_slot_hour),
    ]:
        if not 0 <= hour_value <= 23:
            raise ValueError(f"{hour_name} must be between 0 and 23, got {hour_value}")

    if config.booking.first_slot_hour > config.booking.last_slot_hour:
        raise ValueError(
            "FIRST_SLOT_HOUR must not be after LAST_SLOT_HOUR, "
            f"got {config.booking.first_slot_hour} > {config.booking.last_slot_hour}"
        )
    if not 1 <= config.booking.slot_step_minutes <= 60 or 60 % config.booking.slot_step_minutes:
        raise ValueError(
            "SLOT_STEP_MINUTES must divide an hour evenly, "
            f"got {config.booking.slot_step_minutes}"
        )
    if config.storage.sweep_interval_seconds < 1:
        raise ValueError(
            "SWEEP_INTERVAL_SECONDS must be >= 1, "
            f"got {config.storage.sweep_interval_seconds}"
        )
    if config.bot.poll_timeout_seconds < 0:
        raise ValueError(
            f"POLL_TIMEOUT_SECONDS must be >= 0, got {config.bot.poll_timeout_seconds}"
        )
    if not config.storage.reservations_file.strip():
        raise ValueError("RESERVATIONS_FILE must not be empty")


def require_bot_token(config: AppConfig) -> str:
    """Return the bot token, refusing to serve without one."""
    if not config.bot.token.strip():
        raise ValueError(
            "Bot token not configured. "
            "Please set TELEGRAM_BOT_TOKEN environment variable."
        )
    return config.bot.token


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] [chat=%(chat_id)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_chat_id_filter()
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
