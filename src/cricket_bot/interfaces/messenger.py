"""Abstract interface for the platform Send API."""

from typing import Protocol

from ..models.reply import ReplyPayload


class MessageSender(Protocol):
    """Delivers reply payloads to the messaging platform.

    This protocol defines the contract that outbound adapters must implement.
    """

    async def send(self, payload: ReplyPayload) -> str | None:
        """
        Deliver one payload.

        Args:
            payload: Reply addressed to a single recipient

        Returns:
            Platform message ID when one is assigned (sender actions get none)

        Raises:
            SendError: If the platform rejects the payload or is unreachable
        """
        ...

    async def close(self) -> None:
        """
        Release network resources held by the sender.
        """
        ...
