"""Messenger platform adapters."""

from .send_api import SendAPIAdapter

__all__ = ["SendAPIAdapter"]
