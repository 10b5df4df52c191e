"""Per-sender serialized delivery of queued messages."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from loguru import logger

T = TypeVar("T")

IDLE = "idle"
DRAINING = "draining"


class DeliveryQueue(Generic[T]):
    """
    FIFO queue per key with at most one drain task per key.

    Enqueueing for an idle key starts a drain task that handles items one
    at a time until the queue is empty. An item leaves the queue only after
    its handler returns or raises; failures are logged and the drain moves
    on. Different keys drain concurrently.
    """

    def __init__(self, handler: Callable[[T], Awaitable[None]], name: str = "delivery"):
        self.handler = handler
        self.name = name
        self._pending: dict[str, deque[T]] = {}
        self._drains: dict[str, asyncio.Task[None]] = {}

    def enqueue(self, key: str, item: T) -> None:
        """Append an item for `key`, starting a drain if the key is idle."""
        self._pending.setdefault(key, deque()).append(item)
        if key not in self._drains:
            self._drains[key] = asyncio.create_task(self._drain(key), name=f"{self.name}:{key}")

    def state(self, key: str) -> str:
        return DRAINING if key in self._drains else IDLE

    def pending_count(self, key: str) -> int:
        return len(self._pending.get(key, ()))

    @property
    def active_keys(self) -> list[str]:
        return list(self._drains)

    async def _drain(self, key: str) -> None:
        pending = self._pending[key]
        try:
            while pending:
                item = pending[0]
                try:
                    await self.handler(item)
                except Exception as e:
                    logger.error(f"{self.name}: failed to process message for {key}: {e}")
                finally:
                    pending.popleft()
        finally:
            self._drains.pop(key, None)
            if not pending:
                self._pending.pop(key, None)

    async def join(self) -> None:
        """Wait until every key is idle."""
        while self._drains:
            await asyncio.gather(*list(self._drains.values()), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel running drains and drop what is still queued."""
        tasks = list(self._drains.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._pending.clear()
        self._drains.clear()
