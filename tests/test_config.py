"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from booking_bot.config import (
    AppConfig,
    BookingConfig,
    BotConfig,
    StorageConfig,
    _safe_int,
    _validate_config,
    require_bot_token,
)


def _with_booking(**changes) -> AppConfig:
    config = AppConfig()
    return replace(config, booking=replace(config.booking, **changes))


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_defaults_match_restaurant_rules(self):
        booking = BookingConfig(
            time_zone="Europe/Moscow",
            min_booking_hours=2,
            reservation_ttl_minutes=15,
        )
        assert booking.offered_days >= 1
        assert booking.time_zone == "Europe/Moscow"

    def test_unknown_time_zone(self):
        with pytest.raises(ValueError, match="TIME_ZONE"):
            _validate_config(_with_booking(time_zone="Mars/Olympus"))

    def test_negative_lead_time(self):
        with pytest.raises(ValueError, match="MIN_BOOKING_HOURS"):
            _validate_config(_with_booking(min_booking_hours=-1))

    def test_negative_ttl(self):
        with pytest.raises(ValueError, match="RESERVATION_TTL_MINUTES"):
            _validate_config(_with_booking(reservation_ttl_minutes=-5))

    def test_zero_offered_days(self):
        with pytest.raises(ValueError, match="OFFERED_DAYS"):
            _validate_config(_with_booking(offered_days=0))

    def test_slot_hour_out_of_range(self):
        with pytest.raises(ValueError, match="LAST_SLOT_HOUR"):
            _validate_config(_with_booking(last_slot_hour=24))

    def test_first_slot_after_last(self):
        with pytest.raises(ValueError, match="FIRST_SLOT_HOUR"):
            _validate_config(_with_booking(first_slot_hour=22, last_slot_hour=18))

    @pytest.mark.parametrize("step", [0, 7, 45, 90])
    def test_slot_step_must_divide_hour(self, step):
        with pytest.raises(ValueError, match="SLOT_STEP_MINUTES"):
            _validate_config(_with_booking(slot_step_minutes=step))

    def test_sweep_interval_must_be_positive(self):
        config = AppConfig()
        config = replace(config, storage=StorageConfig(reservations_file="r.csv", sweep_interval_seconds=0))
        with pytest.raises(ValueError, match="SWEEP_INTERVAL_SECONDS"):
            _validate_config(config)

    def test_empty_reservations_file(self):
        config = replace(AppConfig(), storage=StorageConfig(reservations_file="  "))
        with pytest.raises(ValueError, match="RESERVATIONS_FILE"):
            _validate_config(config)

    def test_negative_poll_timeout(self):
        config = replace(AppConfig(), bot=BotConfig(poll_timeout_seconds=-1))
        with pytest.raises(ValueError, match="POLL_TIMEOUT_SECONDS"):
            _validate_config(config)


class TestSafeInt:
    def test_reads_env_value(self, monkeypatch):
        monkeypatch.setenv("TEST_SAFE_INT", "42")
        assert _safe_int("TEST_SAFE_INT", "0") == 42

    def test_falls_back_to_default(self, monkeypatch):
        monkeypatch.delenv("TEST_SAFE_INT", raising=False)
        assert _safe_int("TEST_SAFE_INT", "7") == 7

    def test_bad_value_names_variable(self, monkeypatch):
        monkeypatch.setenv("TEST_SAFE_INT", "twelve")
        with pytest.raises(ValueError, match="TEST_SAFE_INT"):
            _safe_int("TEST_SAFE_INT", "0")


class TestBotToken:
    def test_missing_token_refused(self):
        config = replace(AppConfig(), bot=BotConfig(token=""))
        with pytest.raises(ValueError, match="TELEGRAM_BOT_TOKEN"):
            require_bot_token(config)

    def test_token_returned(self):
        config = replace(AppConfig(), bot=BotConfig(token="123:abc"))
        assert require_bot_token(config) == "123:abc"
