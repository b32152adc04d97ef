from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from paraphraser.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class RequestSuperseded(Exception):
    pass


class SessionRegistry:
    """Keeps at most one in-flight run per session key.

    Starting a run for a key cancels the previous run for that key; the
    caller awaiting the cancelled run gets ``RequestSuperseded``.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task] = {}
        self._superseded: set[asyncio.Task] = set()

    def in_flight(self, key: str) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    async def run(self, key: str, work: Awaitable[T]) -> T:
        previous = self._tasks.get(key)
        if previous is not None and not previous.done():
            self._superseded.add(previous)
            previous.cancel()
            logger.info("session_request_superseded", session=key)

        task = asyncio.ensure_future(work)
        self._tasks[key] = task
        try:
            return await task
        except asyncio.CancelledError:
            if task in self._superseded:
                raise RequestSuperseded(key) from None
            raise
        finally:
            self._superseded.discard(task)
            if self._tasks.get(key) is task:
                del self._tasks[key]


session_registry = SessionRegistry()
