from booking_bot.storage.csv_file import ReservationCsvFile, StorageError
from booking_bot.storage.reservation_store import ReservationRepository, ReservationStore

__all__ = [
    "ReservationCsvFile",
    "ReservationRepository",
    "ReservationStore",
    "StorageError",
]
