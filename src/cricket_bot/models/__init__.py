"""Data models and transfer objects."""

from .content import TOPICS, TOPICS_BY_PAYLOAD, PublicationSummary, Topic
from .event import (
    AccountLinkEvent,
    AuthenticationEvent,
    DeliveryEvent,
    HandlingResult,
    InboundEvent,
    MessageEvent,
    PostbackEvent,
    ReadEvent,
    UnknownEvent,
)
from .intent import (
    Echo,
    Explainer,
    Intent,
    Joke,
    LatestTopicMenu,
    NextMatchInfo,
    PlayerLookup,
    QuickReplyTopic,
)
from .reply import (
    Button,
    GenericTemplate,
    ListTemplate,
    QuickReply,
    QuickReplyMenu,
    ReplyPayload,
    SenderAction,
    SenderActionType,
    TemplateElement,
    TextReply,
)

__all__ = [
    # Event models
    "InboundEvent",
    "AuthenticationEvent",
    "MessageEvent",
    "DeliveryEvent",
    "PostbackEvent",
    "ReadEvent",
    "AccountLinkEvent",
    "UnknownEvent",
    "HandlingResult",
    # Intent models
    "Intent",
    "PlayerLookup",
    "Explainer",
    "Joke",
    "LatestTopicMenu",
    "NextMatchInfo",
    "QuickReplyTopic",
    "Echo",
    # Reply models
    "ReplyPayload",
    "TextReply",
    "QuickReplyMenu",
    "GenericTemplate",
    "ListTemplate",
    "SenderAction",
    "SenderActionType",
    "TemplateElement",
    "Button",
    "QuickReply",
    # Content models
    "PublicationSummary",
    "Topic",
    "TOPICS",
    "TOPICS_BY_PAYLOAD",
]
