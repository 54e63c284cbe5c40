"""In-process publish/subscribe fan-out.

Publishing never waits on subscribers: each subscriber owns a bounded queue
and a full queue drops the message for that subscriber only. Subscribers
see only messages published while they are subscribed.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription(Generic[T]):
    """A subscriber's view of a Broadcaster. Iterate it or call get()."""

    def __init__(self, broadcaster: "Broadcaster[T]", maxsize: int) -> None:
        self._broadcaster = broadcaster
        self.queue: asyncio.Queue[T] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    async def get(self) -> T:
        return await self.queue.get()

    def close(self) -> None:
        self._broadcaster.unsubscribe(self)

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        return await self.queue.get()


class Broadcaster(Generic[T]):
    def __init__(self, name: str) -> None:
        self.name = name
        self._subscribers: list[Subscription[T]] = []

    def subscribe(self, maxsize: int = 100) -> Subscription[T]:
        sub: Subscription[T] = Subscription(self, maxsize)
        self._subscribers.append(sub)
        return sub

    def unsubscribe(self, sub: Subscription[T]) -> None:
        if sub in self._subscribers:
            self._subscribers.remove(sub)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, item: T) -> None:
        """Deliver to every current subscriber without blocking."""
        for sub in list(self._subscribers):
            try:
                sub.queue.put_nowait(item)
            except asyncio.QueueFull:
                sub.dropped += 1
                logger.debug("%s subscriber queue full, message dropped", self.name)
