"""Reply menus and inline button layouts, with their callback payloads."""

from booking_bot.conversation.offers import DATES_PER_ROW, TIMES_PER_ROW
from booking_bot.gateways.base import Button, ButtonRows, Menu
from booking_bot.prompts.messages import (
    LABEL_BACK,
    LABEL_BOOK,
    LABEL_CONTACT_US,
    LABEL_MY_RESERVATION,
    LABEL_SKIP,
)
from booking_bot.utils import chunk

# --- Callback payloads ---
PHONE_CONTACT = "phone_contact"
PHONE_MANUAL = "phone_manual"
CANCEL = "cancel"
DATE_PREFIX = "date_"
TIME_PREFIX = "time_"
EDIT_PREFIX = "edit_"
EDIT_SELECT = "select_"
EDIT_DELETE = "delete_"
EDIT_CHANGE = "change_"
EDIT_CONFIRM = "confirm"

CANCEL_BUTTON = Button("❌ Cancel", CANCEL)

EDIT_FIELD_LABELS = [
    ("name", "Change name"),
    ("phone", "Change phone"),
    ("guests", "Change number of guests"),
    ("date", "Change date"),
    ("time", "Change time"),
    ("comment", "Change comment"),
]


def main_menu(show_my_reservation: bool) -> Menu:
    rows = [[LABEL_BOOK, LABEL_CONTACT_US]]
    if show_my_reservation:
        rows.append([LABEL_MY_RESERVATION])
    return rows


def after_booking_menu() -> Menu:
    return [[LABEL_MY_RESERVATION, LABEL_BOOK], [LABEL_CONTACT_US]]


def reservations_menu() -> Menu:
    return [[LABEL_BACK, LABEL_BOOK], [LABEL_CONTACT_US]]


def skip_menu() -> Menu:
    return [[LABEL_SKIP]]


def phone_method_buttons() -> ButtonRows:
    return [
        [Button("📲 Share contact", PHONE_CONTACT)],
        [Button("⌨ Enter manually", PHONE_MANUAL)],
        [CANCEL_BUTTON],
    ]


def date_buttons(dates: list[str]) -> ButtonRows:
    rows = chunk([Button(d, DATE_PREFIX + d) for d in dates], DATES_PER_ROW)
    rows.append([CANCEL_BUTTON])
    return rows


def time_buttons(times: list[str]) -> ButtonRows:
    rows = chunk([Button(t, TIME_PREFIX + t) for t in times], TIMES_PER_ROW)
    rows.append([CANCEL_BUTTON])
    return rows


def reservation_buttons(reservation_id: str) -> ButtonRows:
    return [[
        Button("Edit", EDIT_PREFIX + EDIT_SELECT + reservation_id),
        Button("Delete", EDIT_PREFIX + EDIT_DELETE + reservation_id),
    ]]


def edit_option_buttons() -> ButtonRows:
    rows = [[Button(label, EDIT_PREFIX + EDIT_CHANGE + field)] for field, label in EDIT_FIELD_LABELS]
    rows.append([Button("✅ Confirm changes", EDIT_PREFIX + EDIT_CONFIRM)])
    rows.append([CANCEL_BUTTON])
    return rows
