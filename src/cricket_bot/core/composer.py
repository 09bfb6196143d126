"""Reply payload builders.

All functions here are pure: they turn an intent's data into a
``ReplyPayload`` addressed to one recipient and never perform I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from cricket_bot.core.static_tables import JokeEntry
from cricket_bot.models.content import TOPICS, PublicationSummary, Topic
from cricket_bot.models.reply import (
    Button,
    GenericTemplate,
    ListTemplate,
    QuickReply,
    QuickReplyMenu,
    SenderAction,
    SenderActionType,
    TemplateElement,
    TextReply,
)

TOPIC_MENU_PROMPT = "Select a Topic"
READ_MORE_TITLE = "read more"
AUTHENTICATION_REPLY = "Authentication successful"
POSTBACK_REPLY = "Postback called"

# Values the publication API emits for missing fields
_MISSING_MARKERS = frozenset({"undefined", "null"})

NEXT_MATCH_IMAGE = (
    "https://images.thewest.com.au/publication/B881022500Z/"
    "1542262499128_GDO1U9KIB.1-2.jpg?imwidth=1024"
)
NEXT_MATCH_MORE_URL = (
    "https://thewest.com.au/sport/cricket/which-cricket-matches-are-on-seven-this-summer-"
    "complete-free-to-air-tv-guide-for-big-bash-league-and-internationals-ng-b881022500z"
)
NEXT_MATCH_FIXTURES: tuple[tuple[str, str], ...] = (
    ("Gillette T20s v India, First T20", "Wednesday 21 Nov 2018 5:50 PM. The Gabba, Brisbane"),
    ("Gillette T20s v India, Second T20", "23 Nov 2018 @ 6:50 PM. MCG, Melbourne"),
    ("Gillette T20s v India, Third T20", "25 Nov 2018 6:50 PM. SCG, Sydney"),
)


def clean_field(value: Any) -> str:
    """Return a document field as text, or "" when it is missing."""
    if value is None:
        return ""
    text = str(value)
    if text in _MISSING_MARKERS:
        return ""
    return text


def publication_url(site_url: str, slug: Any) -> str:
    """Build the public URL of a publication from its slug."""
    slug_text = clean_field(slug).lstrip("/")
    return f"{site_url.rstrip('/')}/{slug_text}" if slug_text else ""


def _image_reference(document: Mapping[str, Any]) -> str:
    for key in ("posterImage", "mainImage"):
        image = document.get(key)
        if isinstance(image, Mapping) and image.get("reference"):
            return clean_field(image["reference"])
    return ""


def summarize_publication(document: Mapping[str, Any], site_url: str) -> PublicationSummary:
    """Reduce a publication API document to its summary."""
    return PublicationSummary(
        title=clean_field(document.get("homepageHead")),
        subtitle=clean_field(document.get("homepageTeaser")),
        url=publication_url(site_url, document.get("slug")),
    )


def text(recipient_id: str, body: str) -> TextReply:
    """Plain text reply."""
    return TextReply(recipient_id=recipient_id, text=body)


def sender_action(recipient_id: str, action: SenderActionType) -> SenderAction:
    """Typing indicator or read marker."""
    return SenderAction(recipient_id=recipient_id, action=action)


def typing_on(recipient_id: str) -> SenderAction:
    return sender_action(recipient_id, SenderActionType.TYPING_ON)


def typing_off(recipient_id: str) -> SenderAction:
    return sender_action(recipient_id, SenderActionType.TYPING_OFF)


def mark_seen(recipient_id: str) -> SenderAction:
    return sender_action(recipient_id, SenderActionType.MARK_SEEN)


def publication_card(recipient_id: str, summary: PublicationSummary) -> GenericTemplate:
    """Single-element card linking to a publication."""
    element = TemplateElement(
        title=summary.title or summary.url,
        subtitle=summary.subtitle,
        item_url=summary.url,
        buttons=(Button(title=READ_MORE_TITLE, url=summary.url),),
    )
    return GenericTemplate(recipient_id=recipient_id, elements=(element,))


def topic_element(document: Mapping[str, Any], site_url: str) -> TemplateElement:
    """Carousel element for one publication API document.

    The item URL is the document's ``_self`` link, falling back to the
    public URL built from its slug.
    """
    item_url = clean_field(document.get("_self")) or publication_url(
        site_url, document.get("slug")
    )
    return TemplateElement(
        title=clean_field(document.get("homepageHead")),
        subtitle=clean_field(document.get("homepageTeaser")),
        item_url=item_url,
        image_url=_image_reference(document),
    )


def topic_carousel(
    recipient_id: str,
    documents: Iterable[Mapping[str, Any]],
    site_url: str,
) -> GenericTemplate:
    """Carousel with one element per fetched document."""
    return GenericTemplate(
        recipient_id=recipient_id,
        elements=tuple(topic_element(d, site_url) for d in documents),
    )


def topic_menu(recipient_id: str, topics: Sequence[Topic] = TOPICS) -> QuickReplyMenu:
    """Quick-reply menu offering the latest-news topics."""
    return QuickReplyMenu(
        recipient_id=recipient_id,
        text=TOPIC_MENU_PROMPT,
        options=tuple(QuickReply(title=t.title, payload=t.payload) for t in topics),
    )


def next_match_fixtures(recipient_id: str) -> ListTemplate:
    """Static list of upcoming fixtures."""
    elements = [TemplateElement(title="Cricket", image_url=NEXT_MATCH_IMAGE)]
    elements.extend(
        TemplateElement(title=title, subtitle=subtitle) for title, subtitle in NEXT_MATCH_FIXTURES
    )
    return ListTemplate(
        recipient_id=recipient_id,
        elements=tuple(elements),
        buttons=(Button(title="More on The West", url=NEXT_MATCH_MORE_URL),),
    )


def joke(recipient_id: str, entry: JokeEntry, signature: str) -> TextReply:
    """Joke text: question, answer and the sponsor line."""
    body = f"{entry.question}\n\n{entry.answer} 😂\n\n\n\n\n--------------\n{signature}"
    return TextReply(recipient_id=recipient_id, text=body)


def definition_not_found(recipient_id: str, term: str) -> TextReply:
    """Generic reply for a term missing from the explainer table."""
    return TextReply(
        recipient_id=recipient_id,
        text=f"Sorry, I don't know what {term} means yet.",
    )
