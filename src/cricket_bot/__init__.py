"""Messenger webhook bot for cricket news, explainers and jokes."""

from cricket_bot._version import __version__

__all__ = ["__version__"]
