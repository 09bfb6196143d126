"""Keyword and pattern matching for message events.

Rules are evaluated independently against the same normalized text, so a
single message can fire several intents ("who is the latest star" asks for
a player lookup and the topic menu at once). Quick-reply taps bypass text
matching entirely.
"""

from __future__ import annotations

import re

import structlog

from cricket_bot.models.content import TOPICS_BY_PAYLOAD
from cricket_bot.models.event import MessageEvent
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

log = structlog.get_logger()

ATTACHMENT_ACK = "Message with attachment received"

_PUNCTUATION = re.compile(r"[^\w\s]", re.ASCII)


def normalize_text(text: str) -> str:
    """Strip punctuation and surrounding whitespace, then lowercase."""
    return _PUNCTUATION.sub("", text).strip().lower()


def capitalize_first(term: str) -> str:
    """Upper-case only the first character, leaving the rest untouched."""
    return term[:1].upper() + term[1:]


class IntentMatcher:
    """Select the intents a message event asks for.

    Example:
        matcher = IntentMatcher()
        intents = matcher.match(event)
        # [PlayerLookup(name="steve smith")]
    """

    PLAYER_PATTERNS = (
        re.compile(r"^tell me more about (.*)"),
        re.compile(r"^tell me about (.*)"),
        re.compile(r"^who is (.*)"),
    )
    EXPLAINER_PATTERNS = (
        re.compile(r"^what is a (.*)"),
        re.compile(r"^what does (.*) mean"),
    )
    JOKE_PHRASE = "tell me a joke"
    LATEST_KEYWORD = "latest"
    NEXT_MATCH_KEYWORD = "next match"

    def __init__(self, echo_unmatched: bool = False) -> None:
        """Initialize the IntentMatcher.

        Args:
            echo_unmatched: Mirror text that fires no rule back to the sender
                instead of staying silent.
        """
        self._echo_unmatched = echo_unmatched

    def match(self, event: MessageEvent) -> list[Intent]:
        """Return every intent fired by a message event.

        Args:
            event: A non-echo message event.

        Returns:
            Fired intents in rule order; empty when nothing applies.
        """
        if event.quick_reply_payload:
            topic = TOPICS_BY_PAYLOAD.get(event.quick_reply_payload)
            if topic is None:
                log.info("unknown_quick_reply_payload", payload=event.quick_reply_payload)
                return []
            return [QuickReplyTopic(topic.payload)]

        if event.text:
            intents = self.match_text(event.text)
            if not intents and self._echo_unmatched:
                return [Echo(event.text)]
            return intents

        if event.attachments:
            return [Echo(ATTACHMENT_ACK)]

        return []

    def match_text(self, text: str) -> list[Intent]:
        """Apply the text rules to a raw message text.

        Args:
            text: Message text as typed by the user.

        Returns:
            Fired intents; each rule contributes at most one per pattern.
        """
        normalized = normalize_text(text)
        intents: list[Intent] = []

        for pattern in self.PLAYER_PATTERNS:
            name = self._capture(pattern, normalized)
            if name:
                intents.append(PlayerLookup(name))

        for pattern in self.EXPLAINER_PATTERNS:
            term = self._capture(pattern, normalized)
            if term:
                intents.append(Explainer(capitalize_first(term)))

        if normalized == self.JOKE_PHRASE:
            intents.append(Joke())

        if self.LATEST_KEYWORD in normalized:
            intents.append(LatestTopicMenu())

        if self.NEXT_MATCH_KEYWORD in normalized:
            intents.append(NextMatchInfo())

        return intents

    @staticmethod
    def _capture(pattern: re.Pattern[str], text: str) -> str | None:
        match = pattern.match(text)
        if match is None:
            return None
        captured = match.group(1)
        return captured if captured.strip() else None
