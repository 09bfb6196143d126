"""Inbound webhook event models.

Each messaging record of a webhook delivery becomes exactly one of the
event variants below. ``InboundEvent`` is the closed union of all of them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class BaseEvent:
    """Fields shared by every messaging event."""

    sender_id: str
    recipient_id: str
    timestamp: int | None

    # Original messaging record
    raw_event: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)


@dataclass(frozen=True)
class AuthenticationEvent(BaseEvent):
    """Opt-in through the "Send to Messenger" plugin."""

    ref: str | None = None


@dataclass(frozen=True)
class MessageEvent(BaseEvent):
    """A message sent to the page (or echoed back from it)."""

    message_id: str | None = None
    text: str | None = None
    attachments: tuple[dict[str, Any], ...] = ()
    quick_reply_payload: str | None = None
    is_echo: bool = False
    app_id: int | str | None = None
    metadata: str | None = None


@dataclass(frozen=True)
class DeliveryEvent(BaseEvent):
    """Delivery confirmation for previously sent messages."""

    message_ids: tuple[str, ...] = ()
    watermark: int | None = None
    seq: int | None = None


@dataclass(frozen=True)
class PostbackEvent(BaseEvent):
    """A postback button was tapped."""

    payload: str | None = None


@dataclass(frozen=True)
class ReadEvent(BaseEvent):
    """All messages up to the watermark were read."""

    watermark: int | None = None
    seq: int | None = None


@dataclass(frozen=True)
class AccountLinkEvent(BaseEvent):
    """The user linked or unlinked an account."""

    status: str | None = None
    authorization_code: str | None = None


@dataclass(frozen=True)
class UnknownEvent(BaseEvent):
    """A record that carries none of the known discriminating fields."""


InboundEvent = (
    AuthenticationEvent
    | MessageEvent
    | DeliveryEvent
    | PostbackEvent
    | ReadEvent
    | AccountLinkEvent
    | UnknownEvent
)


class HandlingResult(Enum):
    """Outcome of handling one inbound event."""

    REPLIED = "replied"
    NO_REPLY = "no_reply"
    IGNORED = "ignored"
    ERROR = "error"
