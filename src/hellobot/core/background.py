"""Detached asyncio work that must finish before the process shuts down."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from hellobot.core.observability import log_event

logger = logging.getLogger(__name__)


class BackgroundTaskTracker:
    """Holds strong references to fire-and-forget tasks until they complete.

    Request handlers schedule work with :meth:`spawn` and return immediately;
    the application lifespan calls :meth:`drain` so pending replies are not
    lost when the server stops.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False

    @property
    def pending(self) -> int:
        """Number of scheduled tasks that have not finished yet."""
        return len(self._tasks)

    def spawn(
        self,
        coro: Coroutine[Any, Any, Any],
        *,
        name: str | None = None,
    ) -> asyncio.Task[Any]:
        """Schedule ``coro`` on the running loop without awaiting it."""
        if self._closed:
            coro.close()
            raise RuntimeError("Background task tracker is closed")
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Background task %s failed",
                task.get_name(),
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    async def drain(self, timeout: float) -> None:
        """Stop accepting work and wait up to ``timeout`` seconds for pending tasks."""
        self._closed = True
        if not self._tasks:
            return

        pending_tasks = set(self._tasks)
        _, still_pending = await asyncio.wait(pending_tasks, timeout=timeout)
        if not still_pending:
            return

        log_event(
            logger,
            level=logging.WARNING,
            event="background.drain_timeout",
            cancelled=len(still_pending),
            timeout_seconds=timeout,
        )
        for task in still_pending:
            task.cancel()
        await asyncio.gather(*still_pending, return_exceptions=True)
