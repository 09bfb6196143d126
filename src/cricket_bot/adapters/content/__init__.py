"""Content source adapters."""

from .publication_api import PublicationAPIAdapter

__all__ = ["PublicationAPIAdapter"]
