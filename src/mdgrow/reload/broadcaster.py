"""Fan-out of change signals to live-reload subscribers.

One producer (the change watcher) and many consumers (open event streams).
Every subscriber owns a bounded ``asyncio.Queue``; when it is full the oldest
pending signal is dropped, since a signal only means "something changed,
refetch". All methods must be called from the event loop thread.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Set

LOGGER = logging.getLogger(__name__)

DEFAULT_BUFFER = 16


@dataclass(frozen=True, slots=True)
class ChangeSignal:
    """Unit event: the content under the root changed."""


CHANGED = ChangeSignal()
_CLOSED = object()


class Subscription:
    """A subscriber's receive channel.

    Iterate it to receive signals; ``close()`` (or leaving the ``async with``
    block) detaches it from the broadcaster.
    """

    def __init__(self, broadcaster: "ReloadBroadcaster", maxsize: int) -> None:
        self._broadcaster = broadcaster
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def _offer(self, item: object) -> None:
        try:
            self._queue.put_nowait(item)
        except asyncio.QueueFull:
            self._queue.get_nowait()
            self._queue.put_nowait(item)
            self.dropped += 1

    def pending(self) -> int:
        return self._queue.qsize()

    async def get(self) -> ChangeSignal | None:
        """Wait for the next signal; ``None`` once the broadcaster closed."""
        if self._closed and self._queue.empty():
            return None
        item = await self._queue.get()
        if item is _CLOSED:
            self._closed = True
            return None
        return item

    def __aiter__(self) -> AsyncIterator[ChangeSignal]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[ChangeSignal]:
        while True:
            signal = await self.get()
            if signal is None:
                return
            yield signal

    def close(self) -> None:
        self._closed = True
        self._broadcaster._discard(self)

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()


class ReloadBroadcaster:
    """Process-wide live-reload channel owned by the running server."""

    def __init__(self, buffer_size: int = DEFAULT_BUFFER) -> None:
        if buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")
        self.buffer_size = buffer_size
        self._subscribers: Set[Subscription] = set()
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self) -> Subscription:
        subscription = Subscription(self, self.buffer_size)
        if self._closed:
            subscription._offer(_CLOSED)
            return subscription
        self._subscribers.add(subscription)
        LOGGER.debug("Reload subscriber connected (%d active)", self.subscriber_count)
        return subscription

    def publish(self) -> int:
        """Deliver a change signal to every subscriber without blocking.

        Returns the number of subscribers reached; with none connected the
        signal is discarded.
        """
        if self._closed:
            return 0
        subscribers = list(self._subscribers)
        for subscription in subscribers:
            subscription._offer(CHANGED)
        return len(subscribers)

    def close(self) -> None:
        """End every live subscription; later publishes are no-ops."""
        self._closed = True
        subscribers = list(self._subscribers)
        self._subscribers.clear()
        for subscription in subscribers:
            subscription._offer(_CLOSED)
        LOGGER.debug("Reload broadcaster closed, released %d subscribers", len(subscribers))

    def _discard(self, subscription: Subscription) -> None:
        if subscription in self._subscribers:
            self._subscribers.discard(subscription)
            LOGGER.debug(
                "Reload subscriber disconnected (%d active)", self.subscriber_count
            )
