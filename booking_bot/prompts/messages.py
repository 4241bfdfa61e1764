"""
User-facing texts and menu labels.

Menu labels double as commands: the orchestrator recognizes them by exact
text match, so changing a label here changes what users must send.
"""

from booking_bot.conversation.state_machine import InputError

# --- Menu labels / commands ---
CMD_START = "/start"
LABEL_BOOK = "Book a table"
LABEL_CONTACT_US = "Contact us"
LABEL_MY_RESERVATION = "My reservation"
LABEL_BACK = "Back"
LABEL_SKIP = "Skip"
LABEL_SEND_CONTACT = "📲 Send my contact"

# --- Prompts ---
MAIN_MENU_PROMPT = "Choose an action:"
BACK_TO_MENU = "Main menu"
ASK_NAME = "Please enter your name:"
ASK_PHONE_METHOD = "How would you like to share your phone number?"
ASK_CONTACT = "Tap the button below to share your contact:"
ASK_MANUAL_PHONE = "Please enter your phone number (11 digits):"
ASK_GUESTS = "Thank you! Now enter the number of guests:"
ASK_COMMENT = "Add any wishes or a comment for your reservation:"
ASK_DATE = "Choose a reservation date:"
ASK_TIME = "Choose a reservation time:"
NO_TIMES_LEFT = "There are no free time slots left for this date. Please press Cancel and choose another day."
EDIT_OPTIONS_FOOTER = "What would you like to change?"
NO_ACTIVE_RESERVATIONS = "You have no active reservations."
CHANGES_SAVED = "✅ Changes saved!"
RESERVATION_GONE = "This reservation is no longer available."
EDIT_STATE_LOST = "Editing error. Please start again."

# --- Validation errors ---
INPUT_ERRORS = {
    InputError.INVALID_NAME: "The name must contain at least 2 characters. Please enter your name:",
    InputError.INVALID_PHONE: "The phone number must contain 11 digits. Please check it and try again.",
    InputError.INVALID_GUESTS: "Please enter a valid number of guests (a number greater than 0).",
    InputError.INVALID_DATE: "Please choose one of the offered dates.",
    InputError.INVALID_TIME: "Please choose one of the offered times.",
}

# --- Edit field prompts (formatted with the current value) ---
EDIT_FIELD_PROMPTS = {
    "name": "Current name: {value}. Enter a new name:",
    "phone": "Current phone: {value}. Enter a new phone number:",
    "guests": "Current number of guests: {value}. Enter a new number:",
    "comment": "Current comment: {value}. Enter a new comment:",
}


def contact_us(manager_phone: str) -> str:
    return f"Our phone number: {manager_phone}"


def reservation_created(reservation_id: str, summary: str) -> str:
    return f"✅ Reservation #{reservation_id} confirmed!\n\nDetails:\n{summary}"


def reservation_card(reservation_id: str, summary: str) -> str:
    return f"Reservation #{reservation_id}\n\n{summary}"


def edit_options(reservation_id: str, summary: str) -> str:
    return f"Editing reservation #{reservation_id}:\n\n{summary}\n\n{EDIT_OPTIONS_FOOTER}"


def reservation_deleted(reservation_id: str) -> str:
    return f"Reservation #{reservation_id} deleted"
