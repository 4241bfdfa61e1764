from booking_bot.conversation.offers import OfferPolicy, offered_dates, offered_times
from booking_bot.conversation.state_machine import (
    ConversationStateMachine,
    EditStateLostError,
    EditStepPendingError,
    InputError,
    InvalidTransitionError,
    Outcome,
    StepResult,
)
from booking_bot.conversation.state_repository import (
    ConversationStateRepository,
    InMemoryConversationStateRepository,
)
from booking_bot.conversation.states import ConversationState, Step

__all__ = [
    "ConversationStateMachine",
    "ConversationState",
    "ConversationStateRepository",
    "InMemoryConversationStateRepository",
    "Step",
    "StepResult",
    "Outcome",
    "InputError",
    "InvalidTransitionError",
    "EditStateLostError",
    "EditStepPendingError",
    "OfferPolicy",
    "offered_dates",
    "offered_times",
]
