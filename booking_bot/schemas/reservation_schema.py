"""Reservation data model and its CSV row representation."""

from datetime import datetime, timedelta, tzinfo
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DATE_FORMAT = "%d.%m.%Y"
TIME_FORMAT = "%H:%M"
NO_COMMENT = "-"

CSV_HEADER = [
    "ID",
    "ChatID",
    "Name",
    "Phone",
    "Guests",
    "Date",
    "Time",
    "Comment",
    "Confirmed",
    "CreatedAt",
]


class Reservation(BaseModel):
    """A confirmed table booking owned by one chat."""

    id: str = Field(min_length=1)
    owner_id: int
    name: str = Field(min_length=1)
    phone: str
    guests: int = Field(gt=0)
    date: str
    time: str
    comment: str = NO_COMMENT
    confirmed: bool = True
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _require_offset(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("created_at must carry a UTC offset")
        return value

    def instant(self, tz: tzinfo) -> Optional[datetime]:
        """The booked date and time as an aware datetime, or None if unparsable."""
        try:
            naive = datetime.strptime(f"{self.date} {self.time}", f"{DATE_FORMAT} {TIME_FORMAT}")
        except ValueError:
            return None
        return naive.replace(tzinfo=tz)

    def is_expired(self, now: datetime, tz: tzinfo, ttl: timedelta) -> bool:
        """True when the booked time plus ``ttl`` has passed. Unparsable never expires."""
        booked = self.instant(tz)
        return booked is not None and now >= booked + ttl

    def is_active(self, now: datetime, tz: tzinfo, ttl: timedelta) -> bool:
        booked = self.instant(tz)
        return self.confirmed and booked is not None and now < booked + ttl

    def to_row(self) -> list[str]:
        return [
            self.id,
            str(self.owner_id),
            self.name,
            self.phone,
            str(self.guests),
            self.date,
            self.time,
            self.comment,
            "true" if self.confirmed else "false",
            self.created_at.isoformat(),
        ]

    @classmethod
    def from_row(cls, row: list[str]) -> "Reservation":
        """Parse a CSV row.

        Raises:
            ValueError: If the row has the wrong number of fields.
            pydantic.ValidationError: If any field fails to parse.
        """
        if len(row) != len(CSV_HEADER):
            raise ValueError(f"expected {len(CSV_HEADER)} fields, got {len(row)}")
        return cls(
            id=row[0],
            owner_id=row[1],
            name=row[2],
            phone=row[3],
            guests=row[4],
            date=row[5],
            time=row[6],
            comment=row[7],
            confirmed=row[8],
            created_at=row[9],
        )

    def summary(self, always_comment: bool = False) -> str:
        """Human-readable block used in confirmations and listings."""
        lines = [
            f"Name: {self.name}",
            f"Phone: {self.phone}",
            f"Guests: {self.guests}",
            f"Date: {self.date}",
            f"Time: {self.time}",
        ]
        if always_comment or (self.comment and self.comment != NO_COMMENT):
            lines.append(f"Comment: {self.comment}")
        return "\n".join(lines)
