"""Async utilities and the bot's exception hierarchy.

This module provides:
- Custom exceptions for the error taxonomy of the webhook pipeline
- A tracker for detached (fire-and-forget) tasks

Detached tasks are never cancelled and never joined on the request path.
The tracker only keeps a strong reference to each task until it finishes,
and offers a bounded wait for use at shutdown.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

import structlog

log = structlog.get_logger()


# =============================================================================
# Custom Exceptions
# =============================================================================


class BotError(Exception):
    """Base exception for all bot errors."""


class SignatureError(BotError):
    """Inbound webhook signature is missing or does not match."""


class VerificationError(BotError):
    """Webhook subscription handshake used a wrong verify token."""


class RemoteFetchError(BotError):
    """Publication API request failed (network, status or parse error)."""


class LookupMiss(BotError):
    """A static lookup table has no entry for the requested key.

    Attributes:
        key: The key that was looked up.
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class SendError(BotError):
    """The Send API rejected a payload or could not be reached.

    Attributes:
        status_code: HTTP status returned by the platform, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# =============================================================================
# Detached Tasks
# =============================================================================


class DetachedTasks:
    """Holds references to fire-and-forget tasks until they complete.

    Example:
        tasks = DetachedTasks()
        tasks.spawn(handler.handle(event), name="event_mid.1")
        ...
        await tasks.drain(timeout=20.0)  # at shutdown only
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task[Any]:
        """Schedule a coroutine without awaiting it.

        Must be called from within a running event loop.

        Args:
            coro: Coroutine to run.
            name: Optional task name for debugging.

        Returns:
            The created task.
        """
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error(
                "detached_task_failed",
                task=task.get_name(),
                error_type=type(exc).__name__,
                error=str(exc),
            )

    async def drain(self, timeout: float) -> int:
        """Wait for in-flight tasks without cancelling them.

        Args:
            timeout: Maximum seconds to wait.

        Returns:
            Number of tasks still running when the wait ended.
        """
        if not self._tasks:
            return 0

        log.info("waiting_for_detached_tasks", count=len(self._tasks))
        _, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        if pending:
            log.warning("detached_tasks_still_running", count=len(pending))
        return len(pending)
