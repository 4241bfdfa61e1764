"""
Finite state machine for the table booking dialogue.

Every input kind (text, shared contact, button choice) is accepted only
in the states listed for it. Valid input moves the dialogue forward;
invalid input leaves the state unchanged and reports which field was
wrong, so the caller can re-prompt. Input that a state does not accept
at all raises InvalidTransitionError.

The machine never touches storage or the transport. Terminal results
(CREATE, EDIT_CONFIRMED) carry the reservation for the caller to persist.

Usage:
    sm = ConversationStateMachine(clock, OfferPolicy())
    result = sm.handle_text(WaitingForName(), "Ivan", owner_id=42)
    assert isinstance(result.state, WaitingForPhone)
"""

import logging
from dataclasses import dataclass
from datetime import timezone
from enum import Enum
from typing import Optional

from booking_bot.clock import Clock
from booking_bot.conversation.offers import OfferPolicy, is_offered_date, is_offered_time
from booking_bot.conversation.states import (
    EDIT_FIELD_STATES,
    EDITING_STATES,
    ConversationState,
    EditingReservation,
    EditingReservationComment,
    EditingReservationDate,
    EditingReservationGuests,
    EditingReservationName,
    EditingReservationPhone,
    EditingReservationTime,
    MainMenu,
    WaitingForComment,
    WaitingForDate,
    WaitingForGuests,
    WaitingForManualPhone,
    WaitingForName,
    WaitingForPhone,
    WaitingForTime,
)
from booking_bot.conversation.validators import (
    parse_comment,
    parse_guests,
    parse_name,
    parse_phone,
)
from booking_bot.schemas.reservation_schema import NO_COMMENT, Reservation
from booking_bot.utils import new_reservation_id

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    """What a handled input did to the dialogue."""
    ADVANCED = "advanced"
    REJECTED = "rejected"
    CREATE = "create"
    EDIT_CONFIRMED = "edit_confirmed"


class InputError(str, Enum):
    """Which field a rejected input failed on."""
    INVALID_NAME = "invalid_name"
    INVALID_PHONE = "invalid_phone"
    INVALID_GUESTS = "invalid_guests"
    INVALID_DATE = "invalid_date"
    INVALID_TIME = "invalid_time"


@dataclass(frozen=True)
class StepResult:
    """State after an input, plus the reservation for terminal outcomes."""
    state: ConversationState
    outcome: Outcome
    error: Optional[InputError] = None
    reservation: Optional[Reservation] = None

    @property
    def accepted(self) -> bool:
        return self.outcome != Outcome.REJECTED


class InvalidTransitionError(Exception):
    """Raised when an input kind is not accepted in the current state."""


class EditStateLostError(InvalidTransitionError):
    """Raised when an edit action arrives but no reservation is being edited."""


class EditStepPendingError(InvalidTransitionError):
    """Raised when an edit action arrives while a field step is still open."""


class ConversationStateMachine:
    """
    Stateless transition rules for the booking and edit dialogues.

    States are values; the machine maps (state, input) to a StepResult and
    leaves storing the new state to the caller.
    """

    def __init__(self, clock: Clock, policy: OfferPolicy) -> None:
        self._clock = clock
        self._policy = policy

    @property
    def policy(self) -> OfferPolicy:
        return self._policy

    # ------------------------------------------------------------------ #
    # Entry points
    # ------------------------------------------------------------------ #

    def start_booking(self) -> ConversationState:
        return WaitingForName()

    def reset(self) -> ConversationState:
        return MainMenu()

    def begin_edit(self, reservation: Reservation) -> ConversationState:
        """Enter the edit options with a detached working copy."""
        return EditingReservation(working_copy=reservation.model_copy())

    # ------------------------------------------------------------------ #
    # Free text
    # ------------------------------------------------------------------ #

    def handle_text(self, state: ConversationState, text: str, owner_id: int) -> StepResult:
        """Route typed text by the current state."""
        if isinstance(state, WaitingForName):
            name = parse_name(text)
            if name is None:
                return self._reject(state, InputError.INVALID_NAME)
            return self._advance(state, WaitingForPhone(name=name))

        if isinstance(state, WaitingForManualPhone):
            phone = parse_phone(text)
            if phone is None:
                return self._reject(state, InputError.INVALID_PHONE)
            return self._advance(state, WaitingForGuests(name=state.name, phone=phone))

        if isinstance(state, WaitingForGuests):
            guests = parse_guests(text)
            if guests is None:
                return self._reject(state, InputError.INVALID_GUESTS)
            return self._advance(
                state, WaitingForComment(name=state.name, phone=state.phone, guests=guests)
            )

        if isinstance(state, WaitingForComment):
            return self._advance(state, self._to_date(state, parse_comment(text)))

        if isinstance(state, (WaitingForDate, EditingReservationDate)):
            return self.select_date(state, text.strip())

        if isinstance(state, (WaitingForTime, EditingReservationTime)):
            return self.select_time(state, text.strip(), owner_id)

        if isinstance(state, EditingReservationName):
            name = parse_name(text)
            if name is None:
                return self._reject(state, InputError.INVALID_NAME)
            return self._edited(state, name=name)

        if isinstance(state, EditingReservationPhone):
            phone = parse_phone(text)
            if phone is None:
                return self._reject(state, InputError.INVALID_PHONE)
            return self._edited(state, phone=phone)

        if isinstance(state, EditingReservationGuests):
            guests = parse_guests(text)
            if guests is None:
                return self._reject(state, InputError.INVALID_GUESTS)
            return self._edited(state, guests=guests)

        if isinstance(state, EditingReservationComment):
            return self._edited(state, comment=parse_comment(text))

        raise InvalidTransitionError(
            f"Free text is not accepted in state '{state.step.value}'"
        )

    def skip_comment(self, state: ConversationState) -> StepResult:
        if not isinstance(state, WaitingForComment):
            raise InvalidTransitionError(
                f"Skip is not accepted in state '{state.step.value}'"
            )
        return self._advance(state, self._to_date(state, NO_COMMENT))

    # ------------------------------------------------------------------ #
    # Phone
    # ------------------------------------------------------------------ #

    def choose_contact_phone(self, state: ConversationState) -> StepResult:
        """Guest wants to share a contact card; wait for it."""
        if not isinstance(state, (WaitingForPhone, WaitingForManualPhone)):
            raise InvalidTransitionError(
                f"Phone choice is not accepted in state '{state.step.value}'"
            )
        return self._advance(state, WaitingForPhone(name=state.name))

    def choose_manual_phone(self, state: ConversationState) -> StepResult:
        if not isinstance(state, (WaitingForPhone, WaitingForManualPhone)):
            raise InvalidTransitionError(
                f"Phone choice is not accepted in state '{state.step.value}'"
            )
        return self._advance(state, WaitingForManualPhone(name=state.name))

    def share_contact(self, state: ConversationState, phone_number: str) -> StepResult:
        if not isinstance(state, WaitingForPhone):
            raise InvalidTransitionError(
                f"Contact is not accepted in state '{state.step.value}'"
            )
        phone = parse_phone(phone_number)
        if phone is None:
            return self._reject(state, InputError.INVALID_PHONE)
        return self._advance(state, WaitingForGuests(name=state.name, phone=phone))

    # ------------------------------------------------------------------ #
    # Date and time
    # ------------------------------------------------------------------ #

    def select_date(self, state: ConversationState, value: str) -> StepResult:
        if not isinstance(state, (WaitingForDate, EditingReservationDate)):
            raise InvalidTransitionError(
                f"Date selection is not accepted in state '{state.step.value}'"
            )
        if not is_offered_date(value, self._clock.now(), self._policy):
            return self._reject(state, InputError.INVALID_DATE)

        if isinstance(state, EditingReservationDate):
            # A new date always needs a new time.
            working = state.working_copy.model_copy(update={"date": value})
            return self._advance(state, EditingReservationTime(working_copy=working))

        return self._advance(
            state,
            WaitingForTime(
                name=state.name,
                phone=state.phone,
                guests=state.guests,
                comment=state.comment,
                date=value,
            ),
        )

    def select_time(self, state: ConversationState, value: str, owner_id: int) -> StepResult:
        """Pick a slot. Finishing a fresh booking yields a CREATE result."""
        if isinstance(state, WaitingForTime):
            if not is_offered_time(value, state.date, self._clock.now(), self._policy):
                return self._reject(state, InputError.INVALID_TIME)
            reservation = self._build_reservation(state, value, owner_id)
            logger.debug("State transition: %s -> %s (create %s)",
                         state.step.value, MainMenu.step.value, reservation.id)
            return StepResult(state=MainMenu(), outcome=Outcome.CREATE, reservation=reservation)

        if isinstance(state, EditingReservationTime):
            if not is_offered_time(value, state.working_copy.date, self._clock.now(), self._policy):
                return self._reject(state, InputError.INVALID_TIME)
            return self._edited(state, time=value)

        raise InvalidTransitionError(
            f"Time selection is not accepted in state '{state.step.value}'"
        )

    def offered_time_date(self, state: ConversationState) -> Optional[str]:
        """The date whose time slots should be offered in ``state``, if any."""
        if isinstance(state, WaitingForTime):
            return state.date
        if isinstance(state, EditingReservationTime):
            return state.working_copy.date
        return None

    # ------------------------------------------------------------------ #
    # Editing
    # ------------------------------------------------------------------ #

    def choose_edit_field(self, state: ConversationState, field_name: str) -> StepResult:
        """Move from the edit options to the step collecting ``field_name``."""
        self._require_edit_options(state)
        target = EDIT_FIELD_STATES.get(field_name)
        if target is None:
            raise InvalidTransitionError(f"Unknown reservation field: {field_name}")
        return self._advance(state, target(working_copy=state.working_copy))

    def confirm_edit(self, state: ConversationState) -> StepResult:
        self._require_edit_options(state)
        logger.debug("State transition: %s -> %s (confirm edit %s)",
                     state.step.value, MainMenu.step.value, state.working_copy.id)
        return StepResult(
            state=MainMenu(),
            outcome=Outcome.EDIT_CONFIRMED,
            reservation=state.working_copy.model_copy(),
        )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _require_edit_options(state: ConversationState) -> None:
        """Edit actions are only accepted from the edit options."""
        if isinstance(state, EditingReservation):
            return
        if isinstance(state, EDITING_STATES):
            raise EditStepPendingError(
                f"Finish '{state.step.value}' before changing another field or confirming"
            )
        raise EditStateLostError(
            f"No reservation is being edited in state '{state.step.value}'"
        )

    def _build_reservation(self, state: WaitingForTime, time_value: str, owner_id: int) -> Reservation:
        return Reservation(
            id=new_reservation_id(owner_id),
            owner_id=owner_id,
            name=state.name,
            phone=state.phone,
            guests=state.guests,
            date=state.date,
            time=time_value,
            comment=state.comment,
            confirmed=True,
            created_at=self._clock.now().astimezone(timezone.utc),
        )

    @staticmethod
    def _to_date(state: WaitingForComment, comment: str) -> WaitingForDate:
        return WaitingForDate(
            name=state.name, phone=state.phone, guests=state.guests, comment=comment
        )

    def _edited(self, state: ConversationState, **changes) -> StepResult:
        working = state.working_copy.model_copy(update=changes)
        return self._advance(state, EditingReservation(working_copy=working))

    @staticmethod
    def _advance(old: ConversationState, new: ConversationState) -> StepResult:
        logger.debug("State transition: %s -> %s", old.step.value, new.step.value)
        return StepResult(state=new, outcome=Outcome.ADVANCED)

    @staticmethod
    def _reject(state: ConversationState, error: InputError) -> StepResult:
        logger.debug("Input rejected in %s: %s", state.step.value, error.value)
        return StepResult(state=state, outcome=Outcome.REJECTED, error=error)
