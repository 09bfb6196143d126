"""Messenger Send API adapter using httpx.

This module implements the MessageSender protocol. Each payload is POSTed
as JSON to ``{graph_url}/{api_version}/me/messages`` with the page access
token in the query string. Failures are raised as ``SendError``; callers
decide whether to log and drop them.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from ...config.schema import MessengerConfig
from ...models.reply import ReplyPayload
from ...utils.async_helpers import SendError
from ...utils.logging import LogEventNames

log = structlog.get_logger()


class SendAPIAdapter:
    """Send API adapter implementing the MessageSender protocol.

    Example:
        adapter = SendAPIAdapter(config.messenger)
        message_id = await adapter.send(TextReply("1254459154682919", "Hello"))
        await adapter.close()
    """

    def __init__(
        self,
        config: MessengerConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Send API adapter.

        Args:
            config: Messenger-specific configuration.
            client: HTTP client to use. If None, creates one with the
                configured timeout.
        """
        self._config = config
        self._client = client or httpx.AsyncClient(timeout=config.send_timeout)
        self._owns_client = client is None

    @property
    def endpoint(self) -> str:
        """Return the Send API URL."""
        return f"{self._config.graph_url}/{self._config.api_version}/me/messages"

    async def send(self, payload: ReplyPayload) -> str | None:
        """Deliver one payload to the Send API.

        Args:
            payload: Reply addressed to a single recipient.

        Returns:
            The platform message ID, or None for sender actions.

        Raises:
            SendError: On transport failure or a non-2xx response.
        """
        body = payload.to_dict()

        try:
            response = await self._client.post(
                self.endpoint,
                params={"access_token": self._config.page_access_token},
                json=body,
            )
        except httpx.HTTPError as e:
            raise SendError(f"Send API request failed: {e}") from e

        if not response.is_success:
            error = self._error_detail(response)
            log.error(
                LogEventNames.SEND_FAILED,
                status_code=response.status_code,
                reason=response.reason_phrase,
                error=error,
            )
            raise SendError(
                f"Send API returned {response.status_code}: {error}",
                status_code=response.status_code,
            )

        result = self._json_or_empty(response)
        recipient_id = result.get("recipient_id")
        message_id = result.get("message_id")

        if message_id:
            log.info(
                LogEventNames.SEND_SUCCEEDED, message_id=message_id, recipient_id=recipient_id
            )
        else:
            log.info("send_api_called", recipient_id=recipient_id)

        return message_id

    async def close(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._owns_client:
            await self._client.aclose()

    @staticmethod
    def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def _error_detail(self, response: httpx.Response) -> Any:
        data = self._json_or_empty(response)
        return data.get("error") or response.text[:500]
