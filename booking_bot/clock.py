"""Wall-clock access pinned to the restaurant's time zone."""

from datetime import datetime
from zoneinfo import ZoneInfo


class Clock:
    """Supplies the current time in a fixed time zone."""

    def __init__(self, time_zone: str) -> None:
        self.tz = ZoneInfo(time_zone)

    def now(self) -> datetime:
        return datetime.now(self.tz)
