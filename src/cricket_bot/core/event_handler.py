"""Per-event handling pipeline.

This module implements the EventHandler class that turns one classified
webhook event into the sequence of Send API calls it calls for:
1. Route the event by kind
2. For messages: send a read receipt, then match intents
3. Run each fired intent's flow (typing indicator, lookup, compose, send)

No failure leaves a flow: remote and send errors are logged and degrade to
a typing-off indicator or a silent drop.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import structlog

from cricket_bot.core import composer
from cricket_bot.core.classifier import event_kind
from cricket_bot.models.content import TOPICS_BY_PAYLOAD
from cricket_bot.models.event import (
    AccountLinkEvent,
    AuthenticationEvent,
    DeliveryEvent,
    HandlingResult,
    InboundEvent,
    MessageEvent,
    PostbackEvent,
    ReadEvent,
)
from cricket_bot.models.intent import (
    Echo,
    Explainer,
    Intent,
    Joke,
    LatestTopicMenu,
    NextMatchInfo,
    PlayerLookup,
    QuickReplyTopic,
)
from cricket_bot.utils.async_helpers import LookupMiss, RemoteFetchError, SendError
from cricket_bot.utils.logging import LogEventNames, bind_context, clear_context
from cricket_bot.utils.security import sanitize_for_logging

if TYPE_CHECKING:
    from cricket_bot.config.schema import BotConfig
    from cricket_bot.core.intent_matcher import IntentMatcher
    from cricket_bot.core.static_tables import StaticTables
    from cricket_bot.interfaces.content import ContentSource
    from cricket_bot.interfaces.messenger import MessageSender
    from cricket_bot.models.reply import ReplyPayload

log = structlog.get_logger()


class EventHandler:
    """Handles one inbound event end to end.

    Responsibilities:
    - Route each event variant to its handler
    - Send the read receipt for every non-echo message
    - Run intent flows, fetching remote or static data as needed
    - Contain every failure so the webhook acknowledgment is never affected

    Example:
        handler = EventHandler(sender, content, tables, matcher, config)
        result = await handler.handle(event)
    """

    def __init__(
        self,
        sender: MessageSender,
        content: ContentSource,
        tables: StaticTables,
        matcher: IntentMatcher,
        config: BotConfig,
    ) -> None:
        """Initialize the EventHandler.

        Args:
            sender: Send API adapter for replies
            content: Publication API adapter for lookups
            tables: Static explainer and joke tables
            matcher: IntentMatcher for message text
            config: Bot configuration
        """
        self._sender = sender
        self._content = content
        self._tables = tables
        self._matcher = matcher
        self._config = config

        self._flows: dict[type, Callable[[str, Any], Awaitable[None]]] = {
            PlayerLookup: self._player_lookup,
            Explainer: self._explainer,
            Joke: self._joke,
            LatestTopicMenu: self._latest_topic_menu,
            NextMatchInfo: self._next_match_info,
            QuickReplyTopic: self._quick_reply_topic,
            Echo: self._echo,
        }

    async def handle(self, event: InboundEvent) -> HandlingResult:
        """Process a single event.

        Args:
            event: Classified webhook event

        Returns:
            HandlingResult describing what was done
        """
        start_time = time.monotonic()
        kind = event_kind(event)
        bind_context(sender_id=event.sender_id, event_kind=kind)

        try:
            if isinstance(event, MessageEvent):
                result = await self._handle_message(event)
            elif isinstance(event, AuthenticationEvent):
                result = await self._handle_authentication(event)
            elif isinstance(event, PostbackEvent):
                result = await self._handle_postback(event)
            elif isinstance(event, DeliveryEvent):
                result = self._log_delivery(event)
            elif isinstance(event, ReadEvent):
                result = self._log_read(event)
            elif isinstance(event, AccountLinkEvent):
                result = self._log_account_link(event)
            else:
                log.info(LogEventNames.EVENT_UNKNOWN, raw_event=event.raw_event)
                result = HandlingResult.IGNORED

        except Exception as e:
            log.exception("event_handling_failed", error=str(e))
            result = HandlingResult.ERROR

        log.info(
            "event_handled",
            result=result.value,
            duration_seconds=round(time.monotonic() - start_time, 3),
        )
        clear_context()
        return result

    async def _handle_message(self, event: MessageEvent) -> HandlingResult:
        log.info(
            LogEventNames.MESSAGE_RECEIVED,
            recipient_id=event.recipient_id,
            timestamp=event.timestamp,
            message_id=event.message_id,
            text=sanitize_for_logging(event.text or ""),
            quick_reply=event.quick_reply_payload,
            attachments=len(event.attachments),
        )

        if event.is_echo:
            log.info(
                LogEventNames.ECHO_RECEIVED,
                message_id=event.message_id,
                app_id=event.app_id,
                metadata=event.metadata,
            )
            return HandlingResult.IGNORED

        await self._send(composer.mark_seen(event.sender_id))

        intents = self._matcher.match(event)
        log.info(LogEventNames.INTENTS_MATCHED, intents=[type(i).__name__ for i in intents])
        if not intents:
            return HandlingResult.NO_REPLY

        await asyncio.gather(*(self._run_intent(event.sender_id, i) for i in intents))
        return HandlingResult.REPLIED

    async def _handle_authentication(self, event: AuthenticationEvent) -> HandlingResult:
        log.info(
            LogEventNames.AUTHENTICATION_RECEIVED,
            recipient_id=event.recipient_id,
            ref=event.ref,
            timestamp=event.timestamp,
        )
        await self._send(composer.text(event.sender_id, composer.AUTHENTICATION_REPLY))
        return HandlingResult.REPLIED

    async def _handle_postback(self, event: PostbackEvent) -> HandlingResult:
        log.info(
            LogEventNames.POSTBACK_RECEIVED,
            recipient_id=event.recipient_id,
            payload=event.payload,
            timestamp=event.timestamp,
        )
        await self._send(composer.text(event.sender_id, composer.POSTBACK_REPLY))
        return HandlingResult.REPLIED

    def _log_delivery(self, event: DeliveryEvent) -> HandlingResult:
        for message_id in event.message_ids:
            log.info(LogEventNames.DELIVERY_CONFIRMED, message_id=message_id)
        log.info("delivered_before_watermark", watermark=event.watermark, seq=event.seq)
        return HandlingResult.NO_REPLY

    def _log_read(self, event: ReadEvent) -> HandlingResult:
        log.info(LogEventNames.READ_RECEIVED, watermark=event.watermark, seq=event.seq)
        return HandlingResult.NO_REPLY

    def _log_account_link(self, event: AccountLinkEvent) -> HandlingResult:
        log.info(
            LogEventNames.ACCOUNT_LINK_RECEIVED,
            status=event.status,
            authorization_code=event.authorization_code,
        )
        return HandlingResult.NO_REPLY

    async def _run_intent(self, recipient_id: str, intent: Intent) -> None:
        """Run one intent flow, turning any failure into typing-off."""
        flow = self._flows[type(intent)]
        try:
            await flow(recipient_id, intent)
        except Exception as e:
            log.exception("intent_flow_failed", intent=type(intent).__name__, error=str(e))
            await self._send(composer.typing_off(recipient_id))

    async def _player_lookup(self, recipient_id: str, intent: PlayerLookup) -> None:
        await self._send(composer.typing_on(recipient_id))

        try:
            documents = await self._content.search(
                intent.name, self._config.content.lookup_page_size
            )
        except RemoteFetchError as e:
            log.warning(LogEventNames.CONTENT_FETCH_FAILED, keyword=intent.name, error=str(e))
            await self._send(composer.typing_off(recipient_id))
            return

        summary = (
            composer.summarize_publication(documents[0], self._config.content.site_url)
            if documents
            else None
        )
        # A card without a link is rejected by the Send API
        if summary is None or not summary.url:
            log.info(LogEventNames.CONTENT_EMPTY, keyword=intent.name)
            await self._send(composer.typing_off(recipient_id))
            return

        await self._send(composer.publication_card(recipient_id, summary))

    async def _explainer(self, recipient_id: str, intent: Explainer) -> None:
        await self._send(composer.typing_on(recipient_id))

        try:
            definition = await self._tables.lookup_definition(intent.term)
        except LookupMiss:
            log.info(LogEventNames.LOOKUP_MISS, term=intent.term)
            await self._send(composer.definition_not_found(recipient_id, intent.term))
            return

        await self._send(composer.text(recipient_id, definition))

    async def _joke(self, recipient_id: str, intent: Joke) -> None:
        await self._send(composer.typing_on(recipient_id))
        entry = await self._tables.pick_joke()
        await self._send(
            composer.joke(recipient_id, entry, self._config.behavior.joke_signature)
        )

    async def _latest_topic_menu(self, recipient_id: str, intent: LatestTopicMenu) -> None:
        await self._send(composer.topic_menu(recipient_id))

    async def _next_match_info(self, recipient_id: str, intent: NextMatchInfo) -> None:
        await self._send(composer.next_match_fixtures(recipient_id))

    async def _quick_reply_topic(self, recipient_id: str, intent: QuickReplyTopic) -> None:
        topic = TOPICS_BY_PAYLOAD[intent.topic_id]
        await self._send(composer.typing_on(recipient_id))

        try:
            documents = await self._content.latest(
                topic.filter, self._config.content.topic_page_size
            )
        except RemoteFetchError as e:
            log.warning(LogEventNames.CONTENT_FETCH_FAILED, topic=topic.filter, error=str(e))
            await self._send(composer.typing_off(recipient_id))
            return

        if not documents:
            log.info(LogEventNames.CONTENT_EMPTY, topic=topic.filter)
            await self._send(composer.typing_off(recipient_id))
            return

        await self._send(
            composer.topic_carousel(recipient_id, documents, self._config.content.site_url)
        )

    async def _echo(self, recipient_id: str, intent: Echo) -> None:
        await self._send(composer.text(recipient_id, intent.text))

    async def _send(self, payload: ReplyPayload) -> bool:
        """Send a payload, logging and dropping a send failure.

        Returns:
            True if the platform accepted the payload
        """
        try:
            await self._sender.send(payload)
        except SendError as e:
            log.warning(
                LogEventNames.SEND_FAILED,
                payload_type=type(payload).__name__,
                status_code=e.status_code,
                error=str(e),
            )
            return False
        return True
