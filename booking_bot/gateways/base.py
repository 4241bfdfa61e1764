"""
Messaging gateway interface consumed by the dialogue orchestrator.

A gateway delivers outbound text, menus and inline choices to a chat and
turns inbound updates into ``TextEvent``/``ContactEvent``/``ButtonEvent``.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

# A reply keyboard: rows of menu labels the user can tap to send as text.
Menu = list[list[str]]


@dataclass(frozen=True)
class Button:
    """Inline button. ``payload`` comes back in a ButtonEvent when pressed."""
    label: str
    payload: str


ButtonRows = list[list[Button]]


class MessagingGateway(Protocol):
    """Outbound side of a chat transport."""

    def send_text(
        self,
        owner_id: int,
        text: str,
        menu: Optional[Menu] = None,
        hide_menu: bool = False,
    ) -> None:
        """Send a message, optionally replacing or hiding the reply keyboard."""
        ...

    def send_choice_prompt(self, owner_id: int, text: str, buttons: ButtonRows) -> None:
        """Send a message with inline buttons."""
        ...

    def request_contact(self, owner_id: int, prompt: str) -> None:
        """Ask the user to share their contact card."""
        ...

    def answer_callback(self, callback_id: str) -> None:
        """Acknowledge a button press."""
        ...
