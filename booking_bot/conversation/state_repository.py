"""Per-owner conversation state storage."""

import threading
from typing import Protocol

from booking_bot.conversation.states import ConversationState, MainMenu


class ConversationStateRepository(Protocol):
    def get(self, owner_id: int) -> ConversationState: ...

    def set(self, owner_id: int, state: ConversationState) -> None: ...

    def reset(self, owner_id: int) -> None: ...


class InMemoryConversationStateRepository:
    """One live state per owner, last write wins. Unknown owners are at the main menu."""

    def __init__(self) -> None:
        self._states: dict[int, ConversationState] = {}
        self._lock = threading.Lock()

    def get(self, owner_id: int) -> ConversationState:
        with self._lock:
            return self._states.get(owner_id, MainMenu())

    def set(self, owner_id: int, state: ConversationState) -> None:
        with self._lock:
            self._states[owner_id] = state

    def reset(self, owner_id: int) -> None:
        self.set(owner_id, MainMenu())
