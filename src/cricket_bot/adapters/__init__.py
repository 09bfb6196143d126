"""Concrete implementations of provider interfaces."""

from .content.publication_api import PublicationAPIAdapter
from .messenger.send_api import SendAPIAdapter

__all__ = [
    "PublicationAPIAdapter",
    "SendAPIAdapter",
]
