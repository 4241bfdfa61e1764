"""
Dialogue orchestrator: routes inbound chat events to the state machine.

Menu labels and /start are handled first and short-circuit the dialogue.
Everything else goes through the owner's current conversation state.
Terminal results are applied to the reservation store and announced to
the guest and the admin chat; every other result just stores the new
state and sends the matching prompt.
"""

from booking_bot.clock import Clock
from booking_bot.conversation.offers import offered_dates, offered_times
from booking_bot.conversation.state_machine import (
    ConversationStateMachine,
    EditStateLostError,
    EditStepPendingError,
    InputError,
    InvalidTransitionError,
    Outcome,
    StepResult,
)
from booking_bot.conversation.state_repository import ConversationStateRepository
from booking_bot.conversation.states import (
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
from booking_bot.gateways.base import MessagingGateway
from booking_bot.logging_context import clear_chat_id, get_chat_logger, set_chat_id
from booking_bot.prompts import keyboards, messages
from booking_bot.schemas.event_schema import (
    ButtonEvent,
    ContactEvent,
    InboundEvent,
    TextEvent,
)
from booking_bot.storage.reservation_store import ReservationRepository
from booking_bot.tools.notifications import AdminNotifier

logger = get_chat_logger(__name__)

_FIELD_STATES = {
    EditingReservationName: "name",
    EditingReservationPhone: "phone",
    EditingReservationGuests: "guests",
    EditingReservationComment: "comment",
}


class DialogueOrchestrator:
    """Maps text, contact and button events onto dialogue transitions."""

    def __init__(
        self,
        gateway: MessagingGateway,
        store: ReservationRepository,
        states: ConversationStateRepository,
        machine: ConversationStateMachine,
        notifier: AdminNotifier,
        clock: Clock,
        manager_phone: str,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._states = states
        self._machine = machine
        self._notifier = notifier
        self._clock = clock
        self._manager_phone = manager_phone

    # ------------------------------------------------------------------ #
    # Event entry points
    # ------------------------------------------------------------------ #

    def handle_event(self, event: InboundEvent) -> None:
        set_chat_id(event.owner_id)
        try:
            if isinstance(event, ButtonEvent):
                self.handle_button(event.owner_id, event.payload, event.callback_id)
            elif isinstance(event, ContactEvent):
                self.handle_contact(event.owner_id, event.phone_number)
            elif isinstance(event, TextEvent):
                self.handle_text(event.owner_id, event.text)
            else:
                logger.warning("Unsupported event type: %s", type(event).__name__)
        finally:
            clear_chat_id()

    def handle_text(self, owner_id: int, text: str) -> None:
        state = self._states.get(owner_id)

        if text == messages.CMD_START:
            self.show_main_menu(owner_id)
            return
        if text == messages.LABEL_BOOK:
            self._set_and_prompt(owner_id, self._machine.start_booking())
            return
        if text == messages.LABEL_CONTACT_US:
            self._gateway.send_text(owner_id, messages.contact_us(self._manager_phone))
            return
        if text == messages.LABEL_MY_RESERVATION:
            self._states.reset(owner_id)
            self.show_reservations(owner_id)
            return
        if text == messages.LABEL_BACK:
            self.show_main_menu(owner_id, silent=True)
            return
        if text == messages.LABEL_SKIP and isinstance(state, WaitingForComment):
            logger.info("Comment skipped")
            self._apply(owner_id, self._machine.skip_comment(state))
            return

        try:
            result = self._machine.handle_text(state, text, owner_id)
        except InvalidTransitionError:
            self._resend_or_menu(owner_id, state)
            return
        self._apply(owner_id, result)

    def handle_contact(self, owner_id: int, phone_number: str) -> None:
        state = self._states.get(owner_id)
        if not isinstance(state, WaitingForPhone):
            logger.debug("Contact ignored in state %s", state.step.value)
            self.show_main_menu(owner_id)
            return
        self._apply(owner_id, self._machine.share_contact(state, phone_number))

    def handle_button(self, owner_id: int, payload: str, callback_id: str = "") -> None:
        self._gateway.answer_callback(callback_id)
        state = self._states.get(owner_id)

        try:
            if payload.startswith(keyboards.DATE_PREFIX):
                value = payload[len(keyboards.DATE_PREFIX):]
                self._apply(owner_id, self._machine.select_date(state, value))
            elif payload.startswith(keyboards.TIME_PREFIX):
                value = payload[len(keyboards.TIME_PREFIX):]
                self._apply(owner_id, self._machine.select_time(state, value, owner_id))
            elif payload.startswith(keyboards.EDIT_PREFIX):
                self._handle_edit_action(owner_id, state, payload[len(keyboards.EDIT_PREFIX):])
            elif payload == keyboards.PHONE_CONTACT:
                result = self._machine.choose_contact_phone(state)
                self._states.set(owner_id, result.state)
                self._gateway.request_contact(owner_id, messages.ASK_CONTACT)
            elif payload == keyboards.PHONE_MANUAL:
                self._apply(owner_id, self._machine.choose_manual_phone(state))
            elif payload == keyboards.CANCEL:
                self.show_main_menu(owner_id)
            else:
                logger.warning("Unknown button payload: %r", payload)
                self.show_main_menu(owner_id)
        except EditStateLostError as exc:
            logger.warning("Edit action without a reservation: %s", exc)
            self._gateway.send_text(owner_id, messages.EDIT_STATE_LOST)
            self.show_main_menu(owner_id)
        except EditStepPendingError as exc:
            logger.info("Edit action while a field is open: %s", exc)
            self._prompt(owner_id, state)
        except InvalidTransitionError as exc:
            logger.info("Stale button %r: %s", payload, exc)
            self.show_main_menu(owner_id)

    # ------------------------------------------------------------------ #
    # Menus and listings
    # ------------------------------------------------------------------ #

    def show_main_menu(self, owner_id: int, silent: bool = False) -> None:
        """Reset the dialogue and show the main menu."""
        self._states.reset(owner_id)
        menu = keyboards.main_menu(self._store.has_active_for_owner(owner_id))
        text = messages.BACK_TO_MENU if silent else messages.MAIN_MENU_PROMPT
        self._gateway.send_text(owner_id, text, menu=menu)

    def show_reservations(self, owner_id: int) -> None:
        active = self._store.get_active_for_owner(owner_id)
        if not active:
            self._gateway.send_text(owner_id, messages.NO_ACTIVE_RESERVATIONS)
            self.show_main_menu(owner_id)
            return

        for reservation in active:
            self._gateway.send_choice_prompt(
                owner_id,
                messages.reservation_card(reservation.id, reservation.summary()),
                keyboards.reservation_buttons(reservation.id),
            )
        self._gateway.send_text(
            owner_id, messages.MAIN_MENU_PROMPT, menu=keyboards.reservations_menu()
        )

    # ------------------------------------------------------------------ #
    # Edit / delete actions
    # ------------------------------------------------------------------ #

    def _handle_edit_action(self, owner_id: int, state: ConversationState, action: str) -> None:
        if action.startswith(keyboards.EDIT_SELECT):
            reservation = self._owned(owner_id, action[len(keyboards.EDIT_SELECT):])
            if reservation is None:
                return
            self._set_and_prompt(owner_id, self._machine.begin_edit(reservation))
        elif action.startswith(keyboards.EDIT_DELETE):
            reservation = self._owned(owner_id, action[len(keyboards.EDIT_DELETE):])
            if reservation is None:
                return
            self._store.delete(reservation.id)
            self._notifier.reservation_deleted(reservation)
            self._gateway.send_text(owner_id, messages.reservation_deleted(reservation.id))
            self.show_main_menu(owner_id)
        elif action.startswith(keyboards.EDIT_CHANGE):
            field_name = action[len(keyboards.EDIT_CHANGE):]
            self._apply(owner_id, self._machine.choose_edit_field(state, field_name))
        elif action == keyboards.EDIT_CONFIRM:
            self._apply(owner_id, self._machine.confirm_edit(state))
        else:
            raise InvalidTransitionError(f"Unknown edit action: {action}")

    def _owned(self, owner_id: int, reservation_id: str):
        """The reservation if it exists and belongs to ``owner_id``; else tell the user."""
        reservation = self._store.get(reservation_id)
        if reservation is None or reservation.owner_id != owner_id:
            logger.info("Reservation %s not available to this chat", reservation_id)
            self._gateway.send_text(owner_id, messages.RESERVATION_GONE)
            self.show_main_menu(owner_id)
            return None
        return reservation

    # ------------------------------------------------------------------ #
    # Applying results
    # ------------------------------------------------------------------ #

    def _apply(self, owner_id: int, result: StepResult) -> None:
        if result.outcome == Outcome.REJECTED:
            self._reprompt(owner_id, result)
        elif result.outcome == Outcome.CREATE:
            self._finish_booking(owner_id, result)
        elif result.outcome == Outcome.EDIT_CONFIRMED:
            self._finish_edit(owner_id, result)
        else:
            self._set_and_prompt(owner_id, result.state)

    def _finish_booking(self, owner_id: int, result: StepResult) -> None:
        reservation = result.reservation
        self._store.create(reservation)
        self._states.set(owner_id, result.state)
        self._notifier.reservation_created(reservation)
        self._gateway.send_text(
            owner_id,
            messages.reservation_created(reservation.id, reservation.summary()),
            menu=keyboards.after_booking_menu(),
        )

    def _finish_edit(self, owner_id: int, result: StepResult) -> None:
        reservation = result.reservation
        if not self._store.update(reservation):
            self._gateway.send_text(owner_id, messages.RESERVATION_GONE)
            self.show_main_menu(owner_id)
            return
        self._notifier.reservation_edited(reservation)
        self._gateway.send_text(owner_id, messages.CHANGES_SAVED)
        self.show_main_menu(owner_id)

    def _reprompt(self, owner_id: int, result: StepResult) -> None:
        self._gateway.send_text(owner_id, messages.INPUT_ERRORS[result.error], hide_menu=True)
        if result.error in (InputError.INVALID_DATE, InputError.INVALID_TIME):
            self._prompt(owner_id, result.state)

    def _resend_or_menu(self, owner_id: int, state: ConversationState) -> None:
        """Unexpected text: repeat the current choice, or fall back to the menu."""
        if isinstance(state, (WaitingForPhone, EditingReservation)):
            self._prompt(owner_id, state)
        else:
            self.show_main_menu(owner_id)

    def _set_and_prompt(self, owner_id: int, state: ConversationState) -> None:
        self._states.set(owner_id, state)
        self._prompt(owner_id, state)

    def _prompt(self, owner_id: int, state: ConversationState) -> None:
        """Send whatever the dialogue needs next in ``state``."""
        gw = self._gateway
        if isinstance(state, WaitingForName):
            gw.send_text(owner_id, messages.ASK_NAME, hide_menu=True)
        elif isinstance(state, WaitingForPhone):
            gw.send_choice_prompt(owner_id, messages.ASK_PHONE_METHOD, keyboards.phone_method_buttons())
        elif isinstance(state, WaitingForManualPhone):
            gw.send_text(owner_id, messages.ASK_MANUAL_PHONE, hide_menu=True)
        elif isinstance(state, WaitingForGuests):
            gw.send_text(owner_id, messages.ASK_GUESTS, hide_menu=True)
        elif isinstance(state, WaitingForComment):
            gw.send_text(owner_id, messages.ASK_COMMENT, menu=keyboards.skip_menu())
        elif isinstance(state, (WaitingForDate, EditingReservationDate)):
            dates = offered_dates(self._clock.now(), self._machine.policy)
            gw.send_choice_prompt(owner_id, messages.ASK_DATE, keyboards.date_buttons(dates))
        elif isinstance(state, (WaitingForTime, EditingReservationTime)):
            self._prompt_time(owner_id, state)
        elif isinstance(state, EditingReservation):
            copy = state.working_copy
            gw.send_choice_prompt(
                owner_id,
                messages.edit_options(copy.id, copy.summary(always_comment=True)),
                keyboards.edit_option_buttons(),
            )
        elif type(state) in _FIELD_STATES:
            field_name = _FIELD_STATES[type(state)]
            value = getattr(state.working_copy, field_name)
            gw.send_text(
                owner_id,
                messages.EDIT_FIELD_PROMPTS[field_name].format(value=value),
                hide_menu=True,
            )
        elif isinstance(state, MainMenu):
            self.show_main_menu(owner_id)

    def _prompt_time(self, owner_id: int, state: ConversationState) -> None:
        date = self._machine.offered_time_date(state)
        times = offered_times(date, self._clock.now(), self._machine.policy)
        if not times:
            self._gateway.send_choice_prompt(
                owner_id, messages.NO_TIMES_LEFT, [[keyboards.CANCEL_BUTTON]]
            )
            return
        self._gateway.send_choice_prompt(owner_id, messages.ASK_TIME, keyboards.time_buttons(times))
