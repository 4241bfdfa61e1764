"""
Conversation states for the table booking dialogue.

Each state is its own frozen dataclass carrying exactly the data collected
so far, so impossible combinations (an edit step without a reservation
being edited, a time step without a chosen date) cannot be built.

The fresh booking dialogue moves linearly:
    MainMenu -> WaitingForName -> WaitingForPhone -> (WaitingForManualPhone)
    -> WaitingForGuests -> WaitingForComment -> WaitingForDate -> WaitingForTime

Editing an existing reservation loops around EditingReservation:
    EditingReservation -> EditingReservation<Field> -> EditingReservation
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from booking_bot.schemas.reservation_schema import Reservation


class Step(str, Enum):
    """Names of every dialogue step, used for logging and routing."""
    MAIN_MENU = "main_menu"
    WAITING_FOR_NAME = "waiting_for_name"
    WAITING_FOR_PHONE = "waiting_for_phone"
    WAITING_FOR_MANUAL_PHONE = "waiting_for_manual_phone"
    WAITING_FOR_GUESTS = "waiting_for_guests"
    WAITING_FOR_COMMENT = "waiting_for_comment"
    WAITING_FOR_DATE = "waiting_for_date"
    WAITING_FOR_TIME = "waiting_for_time"
    EDITING_RESERVATION = "editing_reservation"
    EDITING_NAME = "editing_reservation_name"
    EDITING_PHONE = "editing_reservation_phone"
    EDITING_GUESTS = "editing_reservation_guests"
    EDITING_DATE = "editing_reservation_date"
    EDITING_TIME = "editing_reservation_time"
    EDITING_COMMENT = "editing_reservation_comment"


@dataclass(frozen=True)
class MainMenu:
    step = Step.MAIN_MENU


@dataclass(frozen=True)
class WaitingForName:
    step = Step.WAITING_FOR_NAME


@dataclass(frozen=True)
class WaitingForPhone:
    name: str
    step = Step.WAITING_FOR_PHONE


@dataclass(frozen=True)
class WaitingForManualPhone:
    name: str
    step = Step.WAITING_FOR_MANUAL_PHONE


@dataclass(frozen=True)
class WaitingForGuests:
    name: str
    phone: str
    step = Step.WAITING_FOR_GUESTS


@dataclass(frozen=True)
class WaitingForComment:
    name: str
    phone: str
    guests: int
    step = Step.WAITING_FOR_COMMENT


@dataclass(frozen=True)
class WaitingForDate:
    name: str
    phone: str
    guests: int
    comment: str
    step = Step.WAITING_FOR_DATE


@dataclass(frozen=True)
class WaitingForTime:
    name: str
    phone: str
    guests: int
    comment: str
    date: str
    step = Step.WAITING_FOR_TIME


@dataclass(frozen=True)
class EditingReservation:
    """Edit options menu. ``working_copy`` is detached from the store until confirmed."""
    working_copy: Reservation
    step = Step.EDITING_RESERVATION


@dataclass(frozen=True)
class EditingReservationName:
    working_copy: Reservation
    step = Step.EDITING_NAME


@dataclass(frozen=True)
class EditingReservationPhone:
    working_copy: Reservation
    step = Step.EDITING_PHONE


@dataclass(frozen=True)
class EditingReservationGuests:
    working_copy: Reservation
    step = Step.EDITING_GUESTS


@dataclass(frozen=True)
class EditingReservationDate:
    working_copy: Reservation
    step = Step.EDITING_DATE


@dataclass(frozen=True)
class EditingReservationTime:
    working_copy: Reservation
    step = Step.EDITING_TIME


@dataclass(frozen=True)
class EditingReservationComment:
    working_copy: Reservation
    step = Step.EDITING_COMMENT


ConversationState = Union[
    MainMenu,
    WaitingForName,
    WaitingForPhone,
    WaitingForManualPhone,
    WaitingForGuests,
    WaitingForComment,
    WaitingForDate,
    WaitingForTime,
    EditingReservation,
    EditingReservationName,
    EditingReservationPhone,
    EditingReservationGuests,
    EditingReservationDate,
    EditingReservationTime,
    EditingReservationComment,
]

EditingState = Union[
    EditingReservation,
    EditingReservationName,
    EditingReservationPhone,
    EditingReservationGuests,
    EditingReservationDate,
    EditingReservationTime,
    EditingReservationComment,
]

EDITING_STATES = (
    EditingReservation,
    EditingReservationName,
    EditingReservationPhone,
    EditingReservationGuests,
    EditingReservationDate,
    EditingReservationTime,
    EditingReservationComment,
)

# Edit option button suffix -> the state that collects the new value
EDIT_FIELD_STATES = {
    "name": EditingReservationName,
    "phone": EditingReservationPhone,
    "guests": EditingReservationGuests,
    "date": EditingReservationDate,
    "time": EditingReservationTime,
    "comment": EditingReservationComment,
}
