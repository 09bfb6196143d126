"""Abstract interface for the remote publication API."""

from typing import Any, Protocol


class ContentSource(Protocol):
    """Read-only access to published stories.

    Documents are returned as the raw mappings of the API's ``documents``
    array; callers pick the fields they need.
    """

    async def latest(self, topic_filter: str, page_size: int) -> list[dict[str, Any]]:
        """
        Fetch the most recent documents for a topic.

        Args:
            topic_filter: Remote topic path, e.g. "sport/cricket"
            page_size: Maximum number of documents

        Returns:
            Documents, newest first

        Raises:
            RemoteFetchError: On network, status or parse failure
        """
        ...

    async def search(self, keyword: str, page_size: int) -> list[dict[str, Any]]:
        """
        Fetch documents matching an ID or keyword.

        Args:
            keyword: Publication ID or free-text keyword
            page_size: Maximum number of documents

        Returns:
            Matching documents, best match first

        Raises:
            RemoteFetchError: On network, status or parse failure
        """
        ...

    async def close(self) -> None:
        """
        Release network resources held by the source.
        """
        ...
