"""
Field-level validation for dialogue input.

Each parser returns the normalized value, or None when the input is not
acceptable. The same rules apply to a fresh booking and to editing.
"""

from typing import Optional

from booking_bot.schemas.reservation_schema import NO_COMMENT
from booking_bot.utils import normalize_phone

# Validation thresholds
MIN_NAME_LENGTH = 2
PHONE_DIGITS = 11


def parse_name(value: str) -> Optional[str]:
    name = value.strip()
    return name if len(name) >= MIN_NAME_LENGTH else None


def parse_phone(value: str) -> Optional[str]:
    """Strip non-digits and accept exactly ``PHONE_DIGITS`` digits."""
    phone = normalize_phone(value)
    return phone if len(phone) == PHONE_DIGITS else None


def parse_guests(value: str) -> Optional[int]:
    try:
        guests = int(value.strip())
    except ValueError:
        return None
    return guests if guests > 0 else None


def parse_comment(value: str) -> str:
    """Comments are free text; blank input becomes the no-comment marker."""
    return value.strip() or NO_COMMENT
