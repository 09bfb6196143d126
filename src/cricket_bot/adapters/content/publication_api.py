"""Publication (curation) API adapter using httpx.

This module implements the ContentSource protocol against the curation
API, which answers ``GET`` requests with ``{"documents": [...]}``.

Query parameters:
- ``page`` / ``page_size``: paging (only the first page is used)
- ``includeFuture``: include items scheduled after now
- ``topics``: topic path filter for latest-news lookups
- ``idOrKeyword``: publication ID or keyword for player lookups
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from ...config.schema import ContentConfig
from ...utils.async_helpers import RemoteFetchError

log = structlog.get_logger()


class PublicationAPIAdapter:
    """Curation API adapter implementing the ContentSource protocol.

    No request is retried; a failure surfaces as ``RemoteFetchError``.

    Example:
        adapter = PublicationAPIAdapter(config.content)
        documents = await adapter.latest("sport/cricket", page_size=5)
    """

    def __init__(
        self,
        config: ContentConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the publication API adapter.

        Args:
            config: Content API configuration.
            client: HTTP client to use. If None, creates one with the
                configured timeout.
        """
        self._config = config
        self._client = client or httpx.AsyncClient(timeout=config.timeout)
        self._owns_client = client is None

    async def latest(self, topic_filter: str, page_size: int) -> list[dict[str, Any]]:
        """Fetch the most recent documents for a topic."""
        return await self._fetch({"topics": topic_filter}, page_size)

    async def search(self, keyword: str, page_size: int) -> list[dict[str, Any]]:
        """Fetch documents matching an ID or keyword."""
        return await self._fetch({"idOrKeyword": keyword}, page_size)

    async def close(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _fetch(self, selector: dict[str, str], page_size: int) -> list[dict[str, Any]]:
        params: dict[str, str | int] = {
            "page": 1,
            "page_size": page_size,
            "includeFuture": "true" if self._config.include_future else "false",
            **selector,
        }

        log.debug("content_fetch_start", **selector, page_size=page_size)

        try:
            response = await self._client.get(self._config.api_url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise RemoteFetchError(
                f"Publication API returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise RemoteFetchError(f"Publication API request failed: {e}") from e
        except ValueError as e:
            raise RemoteFetchError(f"Publication API returned invalid JSON: {e}") from e

        documents = data.get("documents") if isinstance(data, dict) else None
        if not isinstance(documents, list):
            raise RemoteFetchError("Publication API response has no documents list")

        log.debug("content_fetch_complete", **selector, count=len(documents))
        return [d for d in documents if isinstance(d, dict)][:page_size]
