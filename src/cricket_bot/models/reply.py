"""Outbound reply payloads for the Send API.

Every payload is addressed to exactly one recipient and serializes to the
JSON body of one Send API call with ``to_dict()``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SenderActionType(Enum):
    """Ephemeral UI signals."""

    TYPING_ON = "typing_on"
    TYPING_OFF = "typing_off"
    MARK_SEEN = "mark_seen"


@dataclass(frozen=True)
class Button:
    """A ``web_url`` template button."""

    title: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "web_url", "url": self.url, "title": self.title}


@dataclass(frozen=True)
class QuickReply:
    """A text quick-reply option."""

    title: str
    payload: str

    def to_dict(self) -> dict[str, Any]:
        return {"content_type": "text", "title": self.title, "payload": self.payload}


@dataclass(frozen=True)
class TemplateElement:
    """One element of a generic or list template.

    ``None`` fields are left out of the serialized element.
    """

    title: str
    subtitle: str | None = None
    item_url: str | None = None
    image_url: str | None = None
    buttons: tuple[Button, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        element: dict[str, Any] = {"title": self.title}
        for key in ("subtitle", "item_url", "image_url"):
            value = getattr(self, key)
            if value is not None:
                element[key] = value
        if self.buttons:
            element["buttons"] = [b.to_dict() for b in self.buttons]
        return element


@dataclass(frozen=True)
class TextReply:
    """Plain text message."""

    recipient_id: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"recipient": {"id": self.recipient_id}, "message": {"text": self.text}}


@dataclass(frozen=True)
class QuickReplyMenu:
    """Text message with quick-reply buttons."""

    recipient_id: str
    text: str
    options: tuple[QuickReply, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipient": {"id": self.recipient_id},
            "message": {
                "text": self.text,
                "quick_replies": [o.to_dict() for o in self.options],
            },
        }


def _template(recipient_id: str, payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "recipient": {"id": recipient_id},
        "message": {"attachment": {"type": "template", "payload": payload}},
    }


@dataclass(frozen=True)
class GenericTemplate:
    """Horizontally scrollable carousel of elements."""

    recipient_id: str
    elements: tuple[TemplateElement, ...]

    def to_dict(self) -> dict[str, Any]:
        return _template(
            self.recipient_id,
            {
                "template_type": "generic",
                "elements": [e.to_dict() for e in self.elements],
            },
        )


@dataclass(frozen=True)
class ListTemplate:
    """Vertical list of elements with optional footer buttons."""

    recipient_id: str
    elements: tuple[TemplateElement, ...]
    buttons: tuple[Button, ...] = ()
    top_element_style: str = "LARGE"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "template_type": "list",
            "top_element_style": self.top_element_style,
            "elements": [e.to_dict() for e in self.elements],
        }
        if self.buttons:
            payload["buttons"] = [b.to_dict() for b in self.buttons]
        return _template(self.recipient_id, payload)


@dataclass(frozen=True)
class SenderAction:
    """Typing indicator or read marker."""

    recipient_id: str
    action: SenderActionType = field(default=SenderActionType.TYPING_ON)

    def to_dict(self) -> dict[str, Any]:
        return {"recipient": {"id": self.recipient_id}, "sender_action": self.action.value}


ReplyPayload = TextReply | QuickReplyMenu | GenericTemplate | ListTemplate | SenderAction
