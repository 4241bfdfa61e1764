"""Inbound chat events delivered by a messaging gateway."""

from typing import Union

from pydantic import BaseModel


class TextEvent(BaseModel):
    """A plain text message, including menu label presses."""
    owner_id: int
    text: str


class ContactEvent(BaseModel):
    """A structured contact card shared by the user."""
    owner_id: int
    phone_number: str


class ButtonEvent(BaseModel):
    """An inline button press. ``callback_id`` must be acknowledged."""
    owner_id: int
    payload: str
    callback_id: str = ""


InboundEvent = Union[TextEvent, ContactEvent, ButtonEvent]
