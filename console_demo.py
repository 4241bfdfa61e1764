"""
Offline console demo: runs the booking dialogue without a bot token.

Uses the real orchestrator, state machine, store and sweeper with a
terminal gateway in place of Telegram. Reservations go to a temporary
CSV file unless --file is given. Designed for live demo walkthroughs.

Input syntax:
    any text           send a text message (menu labels work as commands)
    /contact <phone>   share a contact card
    /press <n>         press the n-th inline button of the last prompt
    quit               leave

Usage:
    python console_demo.py
    python console_demo.py --scenario booking
    python console_demo.py --scenario edit
"""

import argparse
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Optional

from booking_bot.app import build_app
from booking_bot.config import settings
from booking_bot.gateways.base import Button, ButtonRows, Menu
from booking_bot.prompts import messages
from booking_bot.schemas.event_schema import ButtonEvent, ContactEvent, TextEvent

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

CONSOLE_CHAT_ID = 1


class ConsoleGateway:
    """Prints outbound messages and remembers the last inline buttons."""

    def __init__(self) -> None:
        self.last_buttons: list[Button] = []
        self._callbacks = 0

    def send_text(
        self,
        owner_id: int,
        text: str,
        menu: Optional[Menu] = None,
        hide_menu: bool = False,
    ) -> None:
        who = "Bot" if owner_id == CONSOLE_CHAT_ID else f"Bot -> admin {owner_id}"
        print(f"{GREEN}{BOLD}[{who}]{RESET} {GREEN}{text}{RESET}")
        if menu:
            labels = " | ".join(label for row in menu for label in row)
            print(f"{DIM}  menu: {labels}{RESET}")

    def send_choice_prompt(self, owner_id: int, text: str, buttons: ButtonRows) -> None:
        print(f"{GREEN}{BOLD}[Bot]{RESET} {GREEN}{text}{RESET}")
        self.last_buttons = [b for row in buttons for b in row]
        for i, button in enumerate(self.last_buttons, start=1):
            print(f"{YELLOW}  [{i}] {button.label}{RESET}")

    def request_contact(self, owner_id: int, prompt: str) -> None:
        print(f"{GREEN}{BOLD}[Bot]{RESET} {GREEN}{prompt}{RESET}")
        print(f"{DIM}  (type /contact <phone> to share){RESET}")

    def answer_callback(self, callback_id: str) -> None:
        self._callbacks += 1


class ConsoleSession:
    """Drives one chat against the real dialogue stack in the terminal."""

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "booking": [
            "/start",
            messages.LABEL_BOOK,
            "Ivan",
            "/press 1",
            "/contact +7 911 222-33-44",
            "2",
            messages.LABEL_SKIP,
            "/press 2",
            "/press 1",
            messages.LABEL_MY_RESERVATION,
        ],
        "edit": [
            messages.LABEL_BOOK,
            "Anna",
            "/press 2",
            "8 (921) 000-11-22",
            "2",
            "Window seat please",
            "/press 2",
            "/press 3",
            messages.LABEL_MY_RESERVATION,
            "/press 1",
            "/press 3",
            "5",
            "/press 7",
        ],
    }

    def __init__(self, reservations_file: Optional[str] = None) -> None:
        if reservations_file is None:
            self._tmp = tempfile.TemporaryDirectory()
            reservations_file = str(Path(self._tmp.name) / "reservations.csv")
        config = replace(settings, storage=replace(settings.storage, reservations_file=reservations_file))
        self.gateway = ConsoleGateway()
        self.app = build_app(config, self.gateway)

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"TABLE BOOKING BOT - Scenario: {scenario}")
        for step in steps:
            print(f"\n{BLUE}[Guest] {RESET}{step}")
            self._process_input(step)
            self.system_log(f"State: {self._state_name()}")
        self._footer(f"Scenario '{scenario}' complete.")

    def run(self) -> None:
        self._banner("TABLE BOOKING BOT - Console Demo", "Type 'quit' to exit")
        self._process_input(messages.CMD_START)

        while True:
            user_input = input(f"\n{BLUE}[Guest] {RESET}").strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                return
            self._process_input(user_input)
            self.system_log(f"State: {self._state_name()}")

    def _process_input(self, text: str) -> None:
        handle = self.app.orchestrator.handle_event
        if text.startswith("/contact "):
            handle(ContactEvent(owner_id=CONSOLE_CHAT_ID, phone_number=text[len("/contact "):]))
            return
        if text.startswith("/press "):
            button = self._button(text[len("/press "):])
            if button is None:
                print(f"{RED}No such button.{RESET}")
                return
            self.system_log(f"Pressed: {button.label} ({button.payload})")
            handle(ButtonEvent(owner_id=CONSOLE_CHAT_ID, payload=button.payload, callback_id="console"))
            return
        handle(TextEvent(owner_id=CONSOLE_CHAT_ID, text=text))

    def _button(self, raw: str) -> Optional[Button]:
        try:
            index = int(raw.strip())
        except ValueError:
            return None
        if 1 <= index <= len(self.gateway.last_buttons):
            return self.gateway.last_buttons[index - 1]
        return None

    def _state_name(self) -> str:
        return self.app.states.get(CONSOLE_CHAT_ID).step.value

    def _banner(self, *lines: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        for line in lines:
            print(f"{BOLD}  {line}{RESET}")
        print(f"{BOLD}  Restaurant time zone: {settings.booking.time_zone}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    def _footer(self, text: str) -> None:
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {text}{RESET}")
        print(f"{DIM}  Reservations stored: {len(self.app.store)}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    parser.add_argument("--file", default=None, help="Reservations CSV to use")
    args = parser.parse_args()

    session = ConsoleSession(args.file)
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run()


if __name__ == "__main__":
    main()
