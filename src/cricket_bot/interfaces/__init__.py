"""Protocol definitions for pluggable adapters."""

from .content import ContentSource
from .messenger import MessageSender

__all__ = ["ContentSource", "MessageSender"]
