"""Tests for EventHandler flows."""

import random
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from cricket_bot.config.schema import BehaviorConfig, BotConfig
from cricket_bot.core import composer
from cricket_bot.core import event_handler as event_handler_module
from cricket_bot.core.event_handler import EventHandler
from cricket_bot.core.intent_matcher import IntentMatcher
from cricket_bot.core.static_tables import StaticTables
from cricket_bot.models.event import (
    AccountLinkEvent,
    AuthenticationEvent,
    DeliveryEvent,
    HandlingResult,
    MessageEvent,
    PostbackEvent,
    ReadEvent,
    UnknownEvent,
)
from cricket_bot.models.reply import (
    GenericTemplate,
    ListTemplate,
    QuickReplyMenu,
    SenderAction,
    SenderActionType,
    TextReply,
)
from cricket_bot.utils.async_helpers import RemoteFetchError, SendError
from cricket_bot.utils.logging import LogEventNames

SENDER = "1254459154682919"
PAGE = "1106493479453813"


def message(text: str | None = None, **kwargs: Any) -> MessageEvent:
    return MessageEvent(
        sender_id=SENDER,
        recipient_id=PAGE,
        timestamp=1458692752478,
        message_id="mid.1",
        text=text,
        **kwargs,
    )


def sent_payloads(sender: AsyncMock) -> list[Any]:
    return [c.args[0] for c in sender.send.await_args_list]


def actions(payloads: list[Any]) -> list[SenderActionType]:
    return [p.action for p in payloads if isinstance(p, SenderAction)]


@pytest.fixture
def mock_sender() -> AsyncMock:
    """Create a mock Send API adapter."""
    sender = AsyncMock()
    sender.send.return_value = "mid.reply"
    return sender


@pytest.fixture
def mock_content() -> AsyncMock:
    """Create a mock publication API adapter."""
    return AsyncMock()


@pytest.fixture
def tables(bot_config: BotConfig) -> StaticTables:
    """Create tables over the shipped data with a seeded random source."""
    return StaticTables(
        bot_config.data.explainers_path,
        bot_config.data.jokes_path,
        rng=random.Random(7),
    )


@pytest.fixture
def handler(
    mock_sender: AsyncMock,
    mock_content: AsyncMock,
    tables: StaticTables,
    bot_config: BotConfig,
) -> EventHandler:
    """Create an EventHandler instance for testing."""
    return EventHandler(mock_sender, mock_content, tables, IntentMatcher(), bot_config)


class TestMessageFlows:
    """Test replies to message intents."""

    async def test_joke(self, handler, mock_sender, bot_config):
        """Test read receipt, typing indicator, then the joke text."""
        result = await handler.handle(message("Tell me a joke"))

        assert result == HandlingResult.REPLIED
        payloads = sent_payloads(mock_sender)
        assert actions(payloads) == [SenderActionType.MARK_SEEN, SenderActionType.TYPING_ON]
        assert payloads[:2] == [composer.mark_seen(SENDER), composer.typing_on(SENDER)]

        reply = payloads[2]
        assert isinstance(reply, TextReply)
        question, rest = reply.text.split("\n\n", 1)
        assert question.endswith("?")
        assert "😂" in rest
        assert reply.text.endswith(bot_config.behavior.joke_signature)

    async def test_quick_reply_topic(
        self, handler, mock_sender, mock_content, publication_documents
    ):
        """Test a topic tap fetches five documents and sends a carousel."""
        mock_content.latest.return_value = publication_documents

        event = message("Cricket", quick_reply_payload="LATEST_CRICKET_PAYLOAD")
        result = await handler.handle(event)

        assert result == HandlingResult.REPLIED
        mock_content.latest.assert_awaited_once_with("sport/cricket", 5)
        payloads = sent_payloads(mock_sender)
        assert actions(payloads) == [SenderActionType.MARK_SEEN, SenderActionType.TYPING_ON]

        carousel = payloads[-1]
        assert isinstance(carousel, GenericTemplate)
        assert len(carousel.elements) == 5
        assert all(e.item_url for e in carousel.elements)

    async def test_quick_reply_topic_empty_result(self, handler, mock_sender, mock_content):
        """Test an empty topic result turns typing off."""
        mock_content.latest.return_value = []

        await handler.handle(message("Scorchers", quick_reply_payload="LATEST_SCORCHERS_PAYLOAD"))

        assert sent_payloads(mock_sender)[-1] == composer.typing_off(SENDER)

    async def test_player_lookup(self, handler, mock_sender, mock_content, publication_documents):
        """Test a player lookup sends a card for the first document."""
        mock_content.search.return_value = publication_documents

        await handler.handle(message("Who is Steve Smith?"))

        mock_content.search.assert_awaited_once_with("steve smith", 100)
        card = sent_payloads(mock_sender)[-1]
        assert isinstance(card, GenericTemplate)
        assert len(card.elements) == 1
        assert card.elements[0].title == "Cricket story 0"
        assert card.elements[0].item_url == "https://thewest.com.au/sport/cricket/story-0"

    async def test_player_lookup_network_error(self, handler, mock_sender, mock_content):
        """Test a fetch failure sends only typing indicators and no reply."""
        mock_content.search.side_effect = RemoteFetchError("connection refused")

        result = await handler.handle(message("who is steve smith"))

        assert result == HandlingResult.REPLIED
        payloads = sent_payloads(mock_sender)
        assert all(isinstance(p, SenderAction) for p in payloads)
        assert payloads[-1] == composer.typing_off(SENDER)

    async def test_fetch_failure_logged_with_event_name(
        self, handler, mock_content, monkeypatch
    ):
        """Test fetch failures are logged under the shared event name."""
        mock_log = MagicMock()
        monkeypatch.setattr(event_handler_module, "log", mock_log)
        mock_content.search.side_effect = RemoteFetchError("connection refused")

        await handler.handle(message("who is steve smith"))

        mock_log.warning.assert_any_call(
            LogEventNames.CONTENT_FETCH_FAILED, keyword="steve smith", error="connection refused"
        )

    async def test_player_lookup_no_documents(self, handler, mock_sender, mock_content):
        """Test an empty search result turns typing off."""
        mock_content.search.return_value = []

        await handler.handle(message("who is nobody"))

        assert sent_payloads(mock_sender)[-1] == composer.typing_off(SENDER)

    async def test_player_lookup_document_without_slug(self, handler, mock_sender, mock_content):
        """Test a first document with no link turns typing off instead of sending a card."""
        mock_content.search.return_value = [{"homepageHead": None, "homepageTeaser": "x"}]

        await handler.handle(message("who is steve smith"))

        payloads = sent_payloads(mock_sender)
        assert not any(isinstance(p, GenericTemplate) for p in payloads)
        assert payloads[-1] == composer.typing_off(SENDER)

    async def test_explainer(self, handler, mock_sender, tables):
        """Test a known term is answered with its definition."""
        await handler.handle(message("what is a gully"))

        reply = sent_payloads(mock_sender)[-1]
        assert reply == composer.text(SENDER, await tables.lookup_definition("Gully"))

    async def test_explainer_unknown_term(self, handler, mock_sender):
        """Test an unknown term gets the generic not-found text."""
        await handler.handle(message("what does chinaman mean"))

        reply = sent_payloads(mock_sender)[-1]
        assert reply == composer.definition_not_found(SENDER, "Chinaman")

    async def test_latest_menu(self, handler, mock_sender, mock_content):
        """Test the topic menu is sent without any fetch."""
        await handler.handle(message("show me the latest"))

        menu = sent_payloads(mock_sender)[-1]
        assert isinstance(menu, QuickReplyMenu)
        assert len(menu.options) == 8
        mock_content.latest.assert_not_awaited()

    async def test_next_match(self, handler, mock_sender):
        """Test the fixtures list."""
        await handler.handle(message("when is the next match"))

        assert isinstance(sent_payloads(mock_sender)[-1], ListTemplate)

    async def test_multi_fire(self, handler, mock_sender, mock_content, publication_documents):
        """Test that every fired intent produces its own reply."""
        mock_content.search.return_value = publication_documents

        await handler.handle(message("who is the latest star"))

        mock_content.search.assert_awaited_once_with("the latest star", 100)
        kinds = {type(p) for p in sent_payloads(mock_sender)}
        assert {QuickReplyMenu, GenericTemplate} <= kinds

    async def test_unmatched_text_only_marks_seen(self, handler, mock_sender):
        """Test unmatched text is read but not answered."""
        result = await handler.handle(message("good morning"))

        assert result == HandlingResult.NO_REPLY
        assert sent_payloads(mock_sender) == [composer.mark_seen(SENDER)]

    async def test_unmatched_text_echo_enabled(
        self, mock_sender, mock_content, tables, bot_config
    ):
        """Test the configurable echo of unmatched text."""
        config = bot_config.model_copy(update={"behavior": BehaviorConfig(echo_unmatched=True)})
        handler = EventHandler(
            mock_sender,
            mock_content,
            tables,
            IntentMatcher(echo_unmatched=config.behavior.echo_unmatched),
            config,
        )

        await handler.handle(message("good morning"))

        assert sent_payloads(mock_sender)[-1] == composer.text(SENDER, "good morning")

    async def test_attachment_acknowledged(self, handler, mock_sender):
        """Test attachments get the fixed acknowledgment."""
        await handler.handle(message(attachments=({"type": "image"},)))

        assert sent_payloads(mock_sender)[-1] == composer.text(
            SENDER, "Message with attachment received"
        )

    async def test_echo_is_ignored(self, handler, mock_sender):
        """Test messages echoed from the page get no reply at all."""
        result = await handler.handle(message("tell me a joke", is_echo=True, app_id=1))

        assert result == HandlingResult.IGNORED
        mock_sender.send.assert_not_awaited()


class TestFailureContainment:
    """Test that failures never escape the handler."""

    async def test_send_failure_is_dropped(self, handler, mock_sender):
        """Test a rejected send is logged and dropped."""
        mock_sender.send.side_effect = SendError("rejected", status_code=400)

        result = await handler.handle(message("tell me a joke"))

        assert result == HandlingResult.REPLIED
        assert mock_sender.send.await_count == 3

    async def test_unexpected_flow_error_turns_typing_off(
        self, handler, mock_sender, mock_content
    ):
        """Test an unexpected error inside a flow ends with typing off."""
        mock_content.search.side_effect = RuntimeError("boom")

        result = await handler.handle(message("who is steve smith"))

        assert result == HandlingResult.REPLIED
        assert sent_payloads(mock_sender)[-1] == composer.typing_off(SENDER)

    async def test_error_outside_flow_is_reported(self, handler, mock_sender):
        """Test an error before intent dispatch yields ERROR."""
        handler._matcher = MagicMock()
        handler._matcher.match.side_effect = TypeError("bad record")

        result = await handler.handle(message("who is steve smith"))

        assert result == HandlingResult.ERROR


class TestOtherEvents:
    """Test non-message events."""

    async def test_authentication(self, handler, mock_sender):
        """Test the opt-in acknowledgment."""
        event = AuthenticationEvent(SENDER, PAGE, 1, ref="PASS_THROUGH_PARAM")

        assert await handler.handle(event) == HandlingResult.REPLIED
        assert sent_payloads(mock_sender) == [
            composer.text(SENDER, composer.AUTHENTICATION_REPLY)
        ]

    async def test_postback(self, handler, mock_sender):
        """Test the postback acknowledgment."""
        event = PostbackEvent(SENDER, PAGE, 1, payload="USER_DEFINED_PAYLOAD")

        assert await handler.handle(event) == HandlingResult.REPLIED
        assert sent_payloads(mock_sender) == [composer.text(SENDER, composer.POSTBACK_REPLY)]

    @pytest.mark.parametrize(
        "event",
        [
            DeliveryEvent(SENDER, PAGE, 1, message_ids=("mid.1",), watermark=2, seq=3),
            ReadEvent(SENDER, PAGE, 1, watermark=2, seq=3),
            AccountLinkEvent(SENDER, PAGE, 1, status="linked", authorization_code="1234567890"),
        ],
    )
    async def test_logged_only(self, handler, mock_sender, event):
        """Test delivery, read and account-link events send nothing."""
        assert await handler.handle(event) == HandlingResult.NO_REPLY
        mock_sender.send.assert_not_awaited()

    async def test_unknown(self, handler, mock_sender):
        """Test unknown events are ignored without a reply."""
        assert await handler.handle(UnknownEvent(SENDER, PAGE, 1)) == HandlingResult.IGNORED
        mock_sender.send.assert_not_awaited()
