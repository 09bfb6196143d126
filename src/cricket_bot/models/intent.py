"""Intents derived from a single message event."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PlayerLookup:
    """Search the publication API for a player or team."""

    name: str


@dataclass(frozen=True)
class Explainer:
    """Explain a cricket term from the static term table."""

    term: str


@dataclass(frozen=True)
class Joke:
    """Tell a random joke."""


@dataclass(frozen=True)
class LatestTopicMenu:
    """Offer the latest-news topic quick replies."""


@dataclass(frozen=True)
class NextMatchInfo:
    """Show the static upcoming fixtures list."""


@dataclass(frozen=True)
class QuickReplyTopic:
    """Fetch the latest stories for a topic chosen from the menu."""

    topic_id: str


@dataclass(frozen=True)
class Echo:
    """Acknowledge a message with a fixed text."""

    text: str


Intent = PlayerLookup | Explainer | Joke | LatestTopicMenu | NextMatchInfo | QuickReplyTopic | Echo
