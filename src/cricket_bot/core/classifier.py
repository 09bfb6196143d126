"""Conversion of raw webhook records into typed events.

The classifier is the only place that probes the loosely structured wire
format; everything downstream works on the ``InboundEvent`` union.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from cricket_bot.models.event import (
    AccountLinkEvent,
    AuthenticationEvent,
    DeliveryEvent,
    InboundEvent,
    MessageEvent,
    PostbackEvent,
    ReadEvent,
    UnknownEvent,
)

PAGE_OBJECT = "page"

# Discriminating fields, in dispatch order (first match wins)
EVENT_KINDS: tuple[str, ...] = (
    "optin",
    "message",
    "delivery",
    "postback",
    "read",
    "account_linking",
)


def iter_messaging_events(envelope: Mapping[str, Any]) -> Iterator[dict[str, Any]]:
    """Yield every messaging record of a page webhook delivery.

    Deliveries may batch several entries, each with several records.
    Envelopes for other subscription objects yield nothing, as do entries
    that are not objects and ``messaging`` values that are not lists.

    Args:
        envelope: Parsed webhook body.

    Yields:
        Raw messaging records in delivery order.
    """
    if envelope.get("object") != PAGE_OBJECT:
        return

    entries = envelope.get("entry")
    if not isinstance(entries, list):
        return

    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        records = entry.get("messaging")
        if isinstance(records, list):
            yield from records


def classify_event(raw: Mapping[str, Any]) -> InboundEvent:
    """Convert one raw messaging record into an ``InboundEvent``.

    Only field presence is checked. Nested fields are dereferenced as they
    are, so a malformed record raises ``TypeError``/``KeyError``/
    ``AttributeError`` here rather than being silently repaired.

    Args:
        raw: A record from ``entry[].messaging[]``.

    Returns:
        Exactly one event variant.
    """
    common: dict[str, Any] = {
        "sender_id": str(raw["sender"]["id"]) if raw.get("sender") else "",
        "recipient_id": str(raw["recipient"]["id"]) if raw.get("recipient") else "",
        "timestamp": raw.get("timestamp"),
        "raw_event": dict(raw),
    }

    if raw.get("optin"):
        return AuthenticationEvent(**common, ref=raw["optin"].get("ref"))

    if raw.get("message"):
        message = raw["message"]
        quick_reply = message.get("quick_reply")
        return MessageEvent(
            **common,
            message_id=message.get("mid"),
            text=message.get("text"),
            attachments=tuple(message.get("attachments") or ()),
            quick_reply_payload=quick_reply.get("payload") if quick_reply else None,
            is_echo=bool(message.get("is_echo")),
            app_id=message.get("app_id"),
            metadata=message.get("metadata"),
        )

    if raw.get("delivery"):
        delivery = raw["delivery"]
        return DeliveryEvent(
            **common,
            message_ids=tuple(delivery.get("mids") or ()),
            watermark=delivery.get("watermark"),
            seq=delivery.get("seq"),
        )

    if raw.get("postback"):
        return PostbackEvent(**common, payload=raw["postback"].get("payload"))

    if raw.get("read"):
        read = raw["read"]
        return ReadEvent(**common, watermark=read.get("watermark"), seq=read.get("seq"))

    if raw.get("account_linking"):
        linking = raw["account_linking"]
        return AccountLinkEvent(
            **common,
            status=linking.get("status"),
            authorization_code=linking.get("authorization_code"),
        )

    return UnknownEvent(**common)


_KIND_NAMES: dict[type, str] = {
    AuthenticationEvent: "authentication",
    MessageEvent: "message",
    DeliveryEvent: "delivery",
    PostbackEvent: "postback",
    ReadEvent: "read",
    AccountLinkEvent: "account_link",
}


def event_kind(event: InboundEvent) -> str:
    """Return a short, stable name for an event's variant (for logging)."""
    return _KIND_NAMES.get(type(event), "unknown")
