"""Multi-subscriber broadcast channels for status, log and error events.

Publishing never blocks: every subscriber owns a bounded buffer and the oldest
buffered item is dropped when a slow subscriber falls behind. Synchronous
listeners are called inline and their exceptions are logged, never propagated
to the publisher. Late subscribers only see items published after they attach.

Example:
    >>> channel: BroadcastChannel[str] = BroadcastChannel("log")
    >>> sub = channel.subscribe()
    >>> channel.publish("hello")
    >>> sub.drain()
    ['hello']
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from typing import Generic, TypeVar

from ..exceptions import ChannelClosedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BUFFER_SIZE = 100


class Subscription(Generic[T]):
    """One subscriber's view of a broadcast channel.

    Iterate with ``async for`` to receive items until the channel (or this
    subscription) is closed, or call ``drain()`` to take whatever is buffered.
    """

    def __init__(self, channel: BroadcastChannel[T], maxsize: int) -> None:
        self._channel = channel
        self._buffer: deque[T] = deque()
        self._maxsize = maxsize
        self._closed = False
        self._waiters: list[asyncio.Future[None]] = []
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def _push(self, item: T) -> None:
        if self._closed:
            return
        if len(self._buffer) >= self._maxsize:
            self._buffer.popleft()
            self.dropped += 1
            logger.debug(
                "Subscriber on '%s' is behind; dropped oldest item (%d dropped so far)",
                self._channel.name,
                self.dropped,
            )
        self._buffer.append(item)
        self._wake()

    def _close(self) -> None:
        self._closed = True
        self._wake()

    def _wake(self) -> None:
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)

    def drain(self) -> list[T]:
        """Return and clear all currently buffered items."""
        items = list(self._buffer)
        self._buffer.clear()
        return items

    async def get(self) -> T:
        """Wait for the next item.

        Several tasks may wait on one subscription; each item goes to exactly
        one of them.

        Raises:
            ChannelClosedError: If the subscription closes with nothing buffered
        """
        while not self._buffer:
            if self._closed:
                raise ChannelClosedError(self._channel.name)
            waiter = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            try:
                await waiter
            finally:
                if waiter in self._waiters:
                    self._waiters.remove(waiter)
        return self._buffer.popleft()

    def close(self) -> None:
        """Detach from the channel; buffered items remain readable."""
        self._channel._detach(self)
        self._close()

    def __aiter__(self) -> Subscription[T]:
        return self

    async def __anext__(self) -> T:
        try:
            return await self.get()
        except ChannelClosedError:
            raise StopAsyncIteration from None


class BroadcastChannel(Generic[T]):
    """Fan-out channel with explicit drop-oldest back-pressure policy."""

    def __init__(self, name: str, buffer_size: int = DEFAULT_BUFFER_SIZE) -> None:
        """Initialize the channel.

        Args:
            name: Channel name used in log messages
            buffer_size: Per-subscriber buffer capacity
        """
        self.name = name
        self._buffer_size = buffer_size
        self._subscriptions: list[Subscription[T]] = []
        self._listeners: list[Callable[[T], object]] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions) + len(self._listeners)

    def subscribe(self) -> Subscription[T]:
        """Attach a new buffered subscriber.

        Raises:
            ChannelClosedError: If the channel has been closed
        """
        if self._closed:
            raise ChannelClosedError(self.name)
        subscription = Subscription(self, self._buffer_size)
        self._subscriptions.append(subscription)
        return subscription

    def add_listener(self, callback: Callable[[T], object]) -> Callable[[], None]:
        """Register a synchronous callback invoked on every publish.

        Returns:
            Function that removes the listener again

        Raises:
            ChannelClosedError: If the channel has been closed
        """
        if self._closed:
            raise ChannelClosedError(self.name)
        self._listeners.append(callback)

        def remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return remove

    def publish(self, item: T) -> None:
        """Deliver ``item`` to every current subscriber and listener."""
        if self._closed:
            logger.debug("Publish on closed channel '%s' ignored", self.name)
            return

        for subscription in list(self._subscriptions):
            subscription._push(item)

        for listener in list(self._listeners):
            try:
                listener(item)
            except Exception:
                logger.exception("Listener on channel '%s' raised; continuing", self.name)

    def close(self) -> None:
        """Close the channel and end all subscriptions. Idempotent."""
        if self._closed:
            return
        self._closed = True
        for subscription in self._subscriptions:
            subscription._close()
        self._subscriptions.clear()
        self._listeners.clear()

    def _detach(self, subscription: Subscription[T]) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
