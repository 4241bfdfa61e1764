"""
Date and time choices offered to the guest.

Dates are a rolling window starting today; times are a fixed evening grid,
trimmed for today so a booking is never closer than the minimum lead time.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from booking_bot.schemas.reservation_schema import DATE_FORMAT

# Buttons per keyboard row
DATES_PER_ROW = 4
TIMES_PER_ROW = 4


@dataclass(frozen=True)
class OfferPolicy:
    """Booking window parameters."""

    offered_days: int = 10
    first_slot_hour: int = 16
    last_slot_hour: int = 23
    slot_step_minutes: int = 30
    min_booking_hours: int = 2

    @classmethod
    def from_config(cls, booking) -> "OfferPolicy":
        return cls(
            offered_days=booking.offered_days,
            first_slot_hour=booking.first_slot_hour,
            last_slot_hour=booking.last_slot_hour,
            slot_step_minutes=booking.slot_step_minutes,
            min_booking_hours=booking.min_booking_hours,
        )


def offered_dates(now: datetime, policy: OfferPolicy) -> list[str]:
    """The next ``offered_days`` calendar days starting today, in display format."""
    today = now.date()
    return [
        (today + timedelta(days=offset)).strftime(DATE_FORMAT)
        for offset in range(policy.offered_days)
    ]


def offered_times(selected_date: str, now: datetime, policy: OfferPolicy) -> list[str]:
    """Slots for ``selected_date``.

    When the date is today, slots earlier than ``now + min_booking_hours``
    are dropped. ``now`` must already be in the restaurant's time zone.
    """
    is_today = selected_date == now.strftime(DATE_FORMAT)
    earliest = now + timedelta(hours=policy.min_booking_hours)

    slots = []
    for hour in range(policy.first_slot_hour, policy.last_slot_hour + 1):
        for minute in range(0, 60, policy.slot_step_minutes):
            if is_today:
                slot_at = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
                if slot_at < earliest:
                    continue
            slots.append(f"{hour:02d}:{minute:02d}")
    return slots


def is_offered_date(value: str, now: datetime, policy: OfferPolicy) -> bool:
    return value in offered_dates(now, policy)


def is_offered_time(value: str, selected_date: str, now: datetime, policy: OfferPolicy) -> bool:
    return value in offered_times(selected_date, now, policy)
