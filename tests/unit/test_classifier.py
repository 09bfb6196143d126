"""Tests for webhook record classification."""

import pytest

from cricket_bot.core.classifier import classify_event, event_kind, iter_messaging_events
from cricket_bot.models.event import (
    AccountLinkEvent,
    AuthenticationEvent,
    DeliveryEvent,
    MessageEvent,
    PostbackEvent,
    ReadEvent,
    UnknownEvent,
)

BASE = {
    "sender": {"id": "1254459154682919"},
    "recipient": {"id": "1106493479453813"},
    "timestamp": 1458692752478,
}


class TestIterMessagingEvents:
    """Test envelope traversal."""

    def test_yields_records_across_entries(self):
        """Test that every record of every entry is yielded in order."""
        envelope = {
            "object": "page",
            "entry": [
                {"id": "1", "messaging": [{"a": 1}, {"a": 2}]},
                {"id": "2", "messaging": [{"a": 3}]},
            ],
        }
        assert [r["a"] for r in iter_messaging_events(envelope)] == [1, 2, 3]

    def test_non_page_object_yields_nothing(self):
        """Test that other subscription objects are ignored."""
        envelope = {"object": "user", "entry": [{"messaging": [{"a": 1}]}]}
        assert list(iter_messaging_events(envelope)) == []

    @pytest.mark.parametrize(
        "entries",
        [[None], "abc", [{"id": "1", "messaging": 5}], [{"messaging": {"a": 1}}], None],
    )
    def test_malformed_entries_yield_nothing(self, entries):
        """Test non-list entries and messaging values are skipped."""
        envelope = {"object": "page", "entry": entries}
        assert list(iter_messaging_events(envelope)) == []

    def test_entry_without_messaging(self):
        """Test that entries lacking a messaging list are skipped."""
        envelope = {"object": "page", "entry": [{"id": "1"}]}
        assert list(iter_messaging_events(envelope)) == []


class TestClassifyEvent:
    """Test record-to-event conversion."""

    def test_optin_is_authentication(self):
        """Test opt-in records with the pass-through ref."""
        event = classify_event({**BASE, "optin": {"ref": "PASS_THROUGH_PARAM"}})
        assert isinstance(event, AuthenticationEvent)
        assert event.ref == "PASS_THROUGH_PARAM"
        assert event.sender_id == "1254459154682919"
        assert event.recipient_id == "1106493479453813"
        assert event.timestamp == 1458692752478

    def test_text_message(self):
        """Test a plain text message."""
        event = classify_event({**BASE, "message": {"mid": "mid.1", "text": "who is steve"}})
        assert isinstance(event, MessageEvent)
        assert event.message_id == "mid.1"
        assert event.text == "who is steve"
        assert event.attachments == ()
        assert event.quick_reply_payload is None
        assert event.is_echo is False

    def test_quick_reply_message(self):
        """Test that the quick-reply payload is extracted."""
        event = classify_event(
            {
                **BASE,
                "message": {
                    "mid": "mid.2",
                    "text": "Cricket",
                    "quick_reply": {"payload": "LATEST_CRICKET_PAYLOAD"},
                },
            }
        )
        assert isinstance(event, MessageEvent)
        assert event.quick_reply_payload == "LATEST_CRICKET_PAYLOAD"

    def test_echo_message(self):
        """Test echo metadata."""
        event = classify_event(
            {
                **BASE,
                "message": {
                    "mid": "mid.3",
                    "is_echo": True,
                    "app_id": 1517776481860111,
                    "metadata": "DEVELOPER_DEFINED_METADATA",
                },
            }
        )
        assert isinstance(event, MessageEvent)
        assert event.is_echo is True
        assert event.app_id == 1517776481860111
        assert event.metadata == "DEVELOPER_DEFINED_METADATA"

    def test_attachments_become_tuple(self):
        """Test that attachments are stored immutably."""
        event = classify_event(
            {**BASE, "message": {"mid": "mid.4", "attachments": [{"type": "image"}]}}
        )
        assert isinstance(event, MessageEvent)
        assert event.attachments == ({"type": "image"},)

    def test_delivery(self):
        """Test delivery confirmations."""
        event = classify_event(
            {
                **BASE,
                "delivery": {"mids": ["mid.1", "mid.2"], "watermark": 1458668856253, "seq": 37},
            }
        )
        assert isinstance(event, DeliveryEvent)
        assert event.message_ids == ("mid.1", "mid.2")
        assert event.watermark == 1458668856253
        assert event.seq == 37

    def test_postback(self):
        """Test postbacks."""
        event = classify_event({**BASE, "postback": {"payload": "USER_DEFINED_PAYLOAD"}})
        assert isinstance(event, PostbackEvent)
        assert event.payload == "USER_DEFINED_PAYLOAD"

    def test_read(self):
        """Test read receipts."""
        event = classify_event({**BASE, "read": {"watermark": 1458668856253, "seq": 38}})
        assert isinstance(event, ReadEvent)
        assert event.watermark == 1458668856253

    def test_account_linking(self):
        """Test account-link status changes."""
        event = classify_event(
            {**BASE, "account_linking": {"status": "linked", "authorization_code": "1234567890"}}
        )
        assert isinstance(event, AccountLinkEvent)
        assert event.status == "linked"
        assert event.authorization_code == "1234567890"

    def test_missing_discriminators_is_unknown(self):
        """Test that a record with no known field is Unknown."""
        event = classify_event(dict(BASE))
        assert isinstance(event, UnknownEvent)
        assert event.raw_event == BASE

    def test_unknown_without_sender(self):
        """Test that an empty record still classifies."""
        event = classify_event({})
        assert isinstance(event, UnknownEvent)
        assert event.sender_id == ""

    def test_first_match_wins(self):
        """Test dispatch order when several discriminators are present."""
        event = classify_event(
            {**BASE, "message": {"text": "hi"}, "postback": {"payload": "P"}, "optin": {"ref": "r"}}
        )
        assert isinstance(event, AuthenticationEvent)

        event = classify_event({**BASE, "postback": {"payload": "P"}, "read": {"watermark": 1}})
        assert isinstance(event, PostbackEvent)

    def test_malformed_nested_field_raises(self):
        """Test that malformed nested fields are not repaired."""
        with pytest.raises(AttributeError):
            classify_event({**BASE, "postback": "not-a-mapping"})

    def test_events_are_frozen(self):
        """Test that events cannot be mutated."""
        event = classify_event({**BASE, "postback": {"payload": "P"}})
        with pytest.raises(AttributeError):
            event.payload = "changed"  # type: ignore[misc]


class TestEventKind:
    """Test event kind names used in logs."""

    @pytest.mark.parametrize(
        ("record", "kind"),
        [
            ({"optin": {"ref": "r"}}, "authentication"),
            ({"message": {"text": "hi"}}, "message"),
            ({"delivery": {"mids": []}}, "delivery"),
            ({"postback": {"payload": "p"}}, "postback"),
            ({"read": {"watermark": 1}}, "read"),
            ({"account_linking": {"status": "unlinked"}}, "account_link"),
            ({}, "unknown"),
        ],
    )
    def test_kind_names(self, record, kind):
        """Test the kind name of each variant."""
        assert event_kind(classify_event({**BASE, **record})) == kind
