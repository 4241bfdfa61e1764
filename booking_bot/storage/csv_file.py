"""
Row-oriented durable storage for reservations.

One CSV file with a fixed 10-column header. Creates append a row;
updates and deletes rewrite the whole file. Rewrites go through a
temporary file and ``os.replace`` so readers never see a half-written
file.
"""

import csv
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from booking_bot.schemas.reservation_schema import CSV_HEADER, Reservation

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the reservations file cannot be read or written."""


class ReservationCsvFile:
    """Append/rewrite-all access to the reservations CSV."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def ensure_exists(self) -> None:
        """Create the file with just the header if it does not exist yet."""
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", newline="", encoding="utf-8") as fh:
                csv.writer(fh).writerow(CSV_HEADER)
        except OSError as exc:
            raise StorageError(f"cannot create {self.path}: {exc}") from exc
        logger.info("Created reservations file %s", self.path)

    def read_rows(self) -> list[list[str]]:
        """Return every data row (header excluded). A missing file has no rows."""
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", newline="", encoding="utf-8") as fh:
                reader = csv.reader(fh)
                next(reader, None)
                return [row for row in reader if row]
        except (OSError, csv.Error) as exc:
            raise StorageError(f"cannot read {self.path}: {exc}") from exc

    def iter_reservations(self) -> Iterator[Reservation]:
        """Yield parseable reservations, skipping malformed rows with a warning."""
        for line_no, row in enumerate(self.read_rows(), start=2):
            try:
                yield Reservation.from_row(row)
            except ValueError as exc:
                # pydantic.ValidationError is a ValueError subclass
                row_id = row[0] if row else "?"
                logger.warning(
                    "Skipping malformed reservation row %d (ID=%s): %s",
                    line_no, row_id, exc,
                )

    def append(self, reservation: Reservation) -> None:
        self.ensure_exists()
        try:
            with self.path.open("a", newline="", encoding="utf-8") as fh:
                csv.writer(fh).writerow(reservation.to_row())
        except OSError as exc:
            raise StorageError(f"cannot append to {self.path}: {exc}") from exc

    def rewrite(self, transform: Callable[[list[str]], Optional[list[str]]]) -> None:
        """Read all rows, map each through ``transform`` and write the result back.

        ``transform`` returns the row to keep (possibly replaced) or None to drop
        it. Rows that do not parse as reservations are passed through as-is.
        """
        rows = self.read_rows()
        kept = [new for new in (transform(row) for row in rows) if new is not None]
        self._write_all(kept)

    def replace_row(self, reservation: Reservation) -> None:
        """Rewrite the file with the row matching ``reservation.id`` replaced."""
        replacement = reservation.to_row()
        self.rewrite(lambda row: replacement if row[0] == reservation.id else row)

    def remove_row(self, reservation_id: str) -> None:
        """Rewrite the file without the row matching ``reservation_id``."""
        self.rewrite(lambda row: None if row[0] == reservation_id else row)

    def _write_all(self, rows: list[list[str]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", newline="", encoding="utf-8") as fh:
                writer = csv.writer(fh)
                writer.writerow(CSV_HEADER)
                writer.writerows(rows)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise StorageError(f"cannot rewrite {self.path}: {exc}") from exc
