"""Bot orchestrator that owns adapters and schedules event handling.

This module implements the Bot class used by the web layer. It:
- Builds the handling pipeline from configuration
- Classifies each record of a webhook delivery
- Spawns one detached task per event so the webhook can be acknowledged
  immediately
- Waits for in-flight tasks and closes HTTP clients on shutdown
"""

from __future__ import annotations

import random
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from cricket_bot.core.classifier import classify_event, event_kind, iter_messaging_events
from cricket_bot.core.event_handler import EventHandler
from cricket_bot.core.intent_matcher import IntentMatcher
from cricket_bot.core.static_tables import StaticTables
from cricket_bot.models.event import HandlingResult, InboundEvent
from cricket_bot.utils.async_helpers import DetachedTasks

if TYPE_CHECKING:
    from cricket_bot.config.schema import BotConfig
    from cricket_bot.interfaces.content import ContentSource
    from cricket_bot.interfaces.messenger import MessageSender

log = structlog.get_logger()


class Bot:
    """Entry point from the webhook into event handling.

    Handling is fire-and-forget: ``accept`` returns as soon as the tasks
    are scheduled. Tasks are never cancelled.

    Example:
        bot = create_bot(config)
        scheduled = bot.accept(envelope)  # inside the request handler
        ...
        await bot.shutdown()
    """

    def __init__(
        self,
        config: BotConfig,
        sender: MessageSender,
        content: ContentSource,
        tables: StaticTables | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the Bot.

        Args:
            config: Bot configuration
            sender: Send API adapter
            content: Publication API adapter
            tables: Static tables. If None, built from ``config.data``.
            rng: Random source for joke selection (tests pass a seeded one)
        """
        self._config = config
        self._sender = sender
        self._content = content
        self._tables = tables or StaticTables(
            config.data.explainers_path,
            config.data.jokes_path,
            rng=rng,
        )
        self._matcher = IntentMatcher(echo_unmatched=config.behavior.echo_unmatched)
        self._handler = EventHandler(sender, content, self._tables, self._matcher, config)
        self._tasks = DetachedTasks()

        self._events_accepted = 0
        self._events_failed = 0
        self._errors_count = 0

    @property
    def config(self) -> BotConfig:
        """Return the bot configuration."""
        return self._config

    @property
    def content(self) -> ContentSource:
        """Return the publication API adapter."""
        return self._content

    @property
    def tables(self) -> StaticTables:
        """Return the static tables."""
        return self._tables

    @property
    def stats(self) -> dict[str, int]:
        """Return processing statistics."""
        return {
            "events_accepted": self._events_accepted,
            "events_unparseable": self._events_failed,
            "errors_count": self._errors_count,
            "active_tasks": len(self._tasks),
        }

    def accept(self, envelope: Mapping[str, Any]) -> int:
        """Classify a webhook delivery and schedule handling of each event.

        Must be called from within the running event loop. Records that
        cannot be classified are logged and skipped; they never affect the
        other records of the delivery.

        Args:
            envelope: Parsed webhook body

        Returns:
            Number of events scheduled
        """
        scheduled = 0
        for raw in iter_messaging_events(envelope):
            try:
                event = classify_event(raw)
            except (AttributeError, KeyError, TypeError) as e:
                self._events_failed += 1
                log.warning("event_classification_failed", error=str(e), raw_event=raw)
                continue

            self._tasks.spawn(
                self._process(event),
                name=f"event_{event_kind(event)}_{event.sender_id}_{event.timestamp}",
            )
            scheduled += 1

        self._events_accepted += scheduled
        return scheduled

    async def process_event(self, event: InboundEvent) -> HandlingResult:
        """Handle one event and wait for the result (used by tests and tools)."""
        return await self._process(event)

    async def _process(self, event: InboundEvent) -> HandlingResult:
        result = await self._handler.handle(event)
        if result == HandlingResult.ERROR:
            self._errors_count += 1
        return result

    async def shutdown(self, timeout: float | None = None) -> None:
        """Wait for in-flight events, then release adapters.

        Args:
            timeout: Seconds to wait for in-flight tasks. Defaults to the
                configured shutdown grace period.
        """
        grace = self._config.server.shutdown_grace_period if timeout is None else timeout
        log.info("bot_stopping", active_tasks=len(self._tasks))

        await self._tasks.drain(grace)

        for name, adapter in (("sender", self._sender), ("content", self._content)):
            try:
                await adapter.close()
            except Exception as e:
                log.warning("adapter_close_error", adapter=name, error=str(e))

        log.info("bot_stopped", **self.stats)


def create_bot(config: BotConfig) -> Bot:
    """Factory function to create a Bot with its HTTP adapters.

    Args:
        config: Bot configuration

    Returns:
        Configured Bot instance
    """
    from cricket_bot.adapters.content.publication_api import PublicationAPIAdapter
    from cricket_bot.adapters.messenger.send_api import SendAPIAdapter

    sender = SendAPIAdapter(config.messenger)
    content = PublicationAPIAdapter(config.content)
    return Bot(config, sender, content)
