"""Core business logic components.

This module exports the main business logic classes:
- Bot: Schedules handling of webhook deliveries
- EventHandler: Runs the per-event reply flows
- IntentMatcher: Selects intents from message text
- StaticTables: Explainer and joke tables
- classify_event: Converts raw records into typed events
"""

from cricket_bot.core.bot import Bot, create_bot
from cricket_bot.core.classifier import classify_event, iter_messaging_events
from cricket_bot.core.event_handler import EventHandler
from cricket_bot.core.intent_matcher import IntentMatcher
from cricket_bot.core.static_tables import StaticTables

__all__ = [
    "Bot",
    "EventHandler",
    "IntentMatcher",
    "StaticTables",
    "classify_event",
    "create_bot",
    "iter_messaging_events",
]
