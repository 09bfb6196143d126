"""Shared test fixtures for the cricket bot."""

import hashlib
import hmac
import json
from collections.abc import Callable
from typing import Any

import pytest

from cricket_bot.config.schema import BotConfig, MessengerConfig

APP_SECRET = "test-app-secret"
VALIDATION_TOKEN = "test-validation-token"
PAGE_ACCESS_TOKEN = "EAAtestpageaccesstoken1234567890"
SENDER_ID = "1254459154682919"
PAGE_ID = "1106493479453813"


@pytest.fixture
def messenger_config() -> MessengerConfig:
    """Return Messenger settings with test credentials."""
    return MessengerConfig(
        app_secret=APP_SECRET,
        validation_token=VALIDATION_TOKEN,
        page_access_token=PAGE_ACCESS_TOKEN,
        server_url="https://bot.example.com",
    )


@pytest.fixture
def bot_config(messenger_config: MessengerConfig) -> BotConfig:
    """Return a complete bot configuration with defaults."""
    return BotConfig(messenger=messenger_config)


@pytest.fixture
def sign_body() -> Callable[[bytes], str]:
    """Return a function producing the X-Hub-Signature value for a body."""

    def sign(body: bytes, secret: str = APP_SECRET) -> str:
        digest = hmac.new(secret.encode(), body, hashlib.sha1).hexdigest()
        return f"sha1={digest}"

    return sign


def _message_record(
    text: str | None = None,
    quick_reply: str | None = None,
    attachments: list[dict[str, Any]] | None = None,
    is_echo: bool = False,
) -> dict[str, Any]:
    """Build a raw messaging record carrying a message."""
    message: dict[str, Any] = {"mid": "mid.1457764197618:41d102a3e1ae206a38", "seq": 73}
    if text is not None:
        message["text"] = text
    if quick_reply is not None:
        message["quick_reply"] = {"payload": quick_reply}
    if attachments is not None:
        message["attachments"] = attachments
    if is_echo:
        message["is_echo"] = True
        message["app_id"] = 1517776481860111
        message["metadata"] = "DEVELOPER_DEFINED_METADATA_STRING"

    return {
        "sender": {"id": SENDER_ID},
        "recipient": {"id": PAGE_ID},
        "timestamp": 1458692752478,
        "message": message,
    }


def _page_envelope(*records: dict[str, Any]) -> dict[str, Any]:
    """Wrap messaging records in a page webhook envelope."""
    return {
        "object": "page",
        "entry": [{"id": PAGE_ID, "time": 1458692752478, "messaging": list(records)}],
    }


@pytest.fixture
def make_message() -> Callable[..., dict[str, Any]]:
    """Return a builder for raw message records."""
    return _message_record


@pytest.fixture
def make_envelope() -> Callable[..., dict[str, Any]]:
    """Return a builder for page webhook envelopes."""
    return _page_envelope


@pytest.fixture
def envelope_bytes() -> Callable[..., bytes]:
    """Return a function serializing records into a raw webhook body."""

    def serialize(*records: dict[str, Any]) -> bytes:
        return json.dumps(_page_envelope(*records)).encode()

    return serialize


@pytest.fixture
def publication_documents() -> list[dict[str, Any]]:
    """Return five publication API documents."""
    return [
        {
            "homepageHead": f"Cricket story {i}",
            "homepageTeaser": f"Teaser {i}",
            "_self": f"https://gazette.swmdigital.io/publication/{i}",
            "slug": f"sport/cricket/story-{i}",
            "posterImage": {"reference": f"https://images.thewest.com.au/{i}.jpg"},
        }
        for i in range(5)
    ]
