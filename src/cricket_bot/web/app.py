"""FastAPI application exposing the Messenger webhook.

Routes:
- ``GET /webhook``: subscription handshake
- ``POST /webhook``: signed event deliveries, acknowledged immediately
- ``GET /authorize``: account-linking login page
- ``GET /healthz``: health report
"""

from __future__ import annotations

import html
import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from cricket_bot._version import __version__
from cricket_bot.core.bot import Bot, create_bot
from cricket_bot.core.classifier import PAGE_OBJECT
from cricket_bot.utils.async_helpers import SignatureError, VerificationError
from cricket_bot.utils.health import HealthChecker
from cricket_bot.utils.logging import LogEventNames
from cricket_bot.utils.security import SIGNATURE_HEADER, verify_signature

if TYPE_CHECKING:
    from cricket_bot.config.schema import BotConfig

log = structlog.get_logger()

SUBSCRIBE_MODE = "subscribe"

_AUTHORIZE_PAGE = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>Link your account</title>
  </head>
  <body>
    <h1>Link your account</h1>
    <p>Account linking token: <code>{token}</code></p>
    <p><a href="{success}">Complete account link</a></p>
    <p><a href="{cancel}">Cancel</a></p>
  </body>
</html>
"""


def verify_handshake(mode: str | None, token: str | None, expected_token: str) -> None:
    """Check a subscription handshake.

    Raises:
        VerificationError: If the mode is not ``subscribe`` or the token
            does not match.
    """
    if mode != SUBSCRIBE_MODE:
        raise VerificationError(f"Unexpected hub.mode: {mode!r}")
    if token != expected_token:
        raise VerificationError("Verification token mismatch")


def render_authorize_page(
    account_linking_token: str | None,
    redirect_uri: str | None,
    authorization_code: str,
) -> str:
    """Render the account-linking page.

    The success link is the redirect URI with the authorization code
    appended as ``&authorization_code=<code>``.
    """
    redirect_uri = redirect_uri or ""
    success = f"{redirect_uri}&authorization_code={authorization_code}"
    return _AUTHORIZE_PAGE.format(
        token=html.escape(account_linking_token or ""),
        success=html.escape(success, quote=True),
        cancel=html.escape(redirect_uri, quote=True),
    )


def create_app(config: BotConfig, bot: Bot | None = None) -> FastAPI:
    """Build the webhook application.

    Args:
        config: Bot configuration
        bot: Bot to dispatch events to. If None, one is created with live
            HTTP adapters.

    Returns:
        FastAPI application. The bot is shut down with the application.
    """
    bot = bot or create_bot(config)
    messenger = config.messenger

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info(
            "bot_starting",
            server_url=messenger.server_url,
            strict_signature=messenger.strict_signature,
        )
        yield
        await bot.shutdown()

    app = FastAPI(title="Cricket Messenger Bot", version=__version__, lifespan=lifespan)
    app.state.bot = bot

    @app.get("/webhook")
    async def verify_webhook(
        hub_mode: str | None = Query(default=None, alias="hub.mode"),
        hub_verify_token: str | None = Query(default=None, alias="hub.verify_token"),
        hub_challenge: str | None = Query(default=None, alias="hub.challenge"),
    ) -> PlainTextResponse:
        try:
            verify_handshake(hub_mode, hub_verify_token, messenger.validation_token)
        except VerificationError as e:
            log.warning(LogEventNames.WEBHOOK_VERIFICATION_FAILED, error=str(e))
            return PlainTextResponse("Forbidden", status_code=403)

        log.info(LogEventNames.WEBHOOK_VERIFIED)
        return PlainTextResponse(hub_challenge or "")

    @app.post("/webhook")
    async def receive_webhook(request: Request) -> JSONResponse:
        body = await request.body()

        try:
            verify_signature(messenger.app_secret, body, request.headers.get(SIGNATURE_HEADER))
        except SignatureError as e:
            log.warning(
                LogEventNames.SIGNATURE_INVALID,
                error=str(e),
                strict=messenger.strict_signature,
            )
            if messenger.strict_signature:
                return JSONResponse({"status": "forbidden"}, status_code=403)

        try:
            envelope = json.loads(body)
        except ValueError as e:
            log.warning(LogEventNames.WEBHOOK_IGNORED, reason="invalid_json", error=str(e))
            return JSONResponse({"status": "ignored"})

        if not isinstance(envelope, dict) or envelope.get("object") != PAGE_OBJECT:
            log.info(LogEventNames.WEBHOOK_IGNORED, reason="not_page_object")
            return JSONResponse({"status": "ignored"})

        scheduled = bot.accept(envelope)
        log.info(LogEventNames.WEBHOOK_RECEIVED, events=scheduled)
        return JSONResponse({"status": "received"})

    @app.get("/authorize")
    async def authorize(
        account_linking_token: str | None = None,
        redirect_uri: str | None = None,
    ) -> HTMLResponse:
        return HTMLResponse(
            render_authorize_page(
                account_linking_token,
                redirect_uri,
                config.behavior.authorization_code,
            )
        )

    @app.get("/healthz")
    async def healthcheck() -> JSONResponse:
        checker = HealthChecker(config, tables=bot.tables, content=bot.content)
        report = await checker.run_all_checks()
        payload = report.to_dict()
        payload["stats"] = bot.stats
        return JSONResponse(payload, status_code=200 if report.healthy else 503)

    return app
