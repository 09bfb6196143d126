"""HTTP surface of the bot."""

from cricket_bot.web.app import create_app, render_authorize_page, verify_handshake

__all__ = ["create_app", "render_authorize_page", "verify_handshake"]
