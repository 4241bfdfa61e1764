"""Shared utilities used across the booking bot."""

import re
import time
from typing import Sequence, TypeVar, Union

T = TypeVar("T")

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping every non-digit character.

    Examples:
        >>> normalize_phone("+7 911 222-33-44")
        '79112223344'
        >>> normalize_phone("8 (911) 222 33 44")
        '89112223344'
    """
    return _NON_DIGITS.sub("", value)


def new_reservation_id(owner_id: Union[int, str]) -> str:
    """Build a reservation ID from the owner and a nanosecond timestamp."""
    return f"{owner_id}-{time.time_ns()}"


def chunk(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into consecutive rows of at most ``size`` elements."""
    return [list(items[i:i + size]) for i in range(0, len(items), size)]
