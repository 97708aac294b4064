import asyncio
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

T = TypeVar("T")


_CLOSED = object()


class SubscriptionClosed(Exception):
    """Raised by `Subscription.get()` once the subscription is closed."""


class Subscription(Generic[T]):
    """
    One consumer's view of a LiveValue. Holds at most one undelivered value:
    a newer publish replaces an older one the consumer has not read yet.
    Closing wakes a consumer blocked in `get()` or `async for`.
    """

    def __init__(self, source: "LiveValue[T]", initial: T):
        self._source = source
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._queue.put_nowait(initial)
        self.closed = False

    def _push(self, value):
        if not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(value)

    async def get(self) -> T:
        if self.closed and self._queue.empty():
            raise SubscriptionClosed()
        value = await self._queue.get()
        if value is _CLOSED:
            # Leave the marker for any other waiter
            self._queue.put_nowait(_CLOSED)
            raise SubscriptionClosed()
        return value

    def close(self):
        if self.closed:
            return
        self.closed = True
        self._source._unsubscribe(self)
        self._push(_CLOSED)

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        try:
            return await self.get()
        except SubscriptionClosed:
            raise StopAsyncIteration from None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class LiveValue(Generic[T]):
    """Latest-value channel: subscribers get the current value, then every update."""

    def __init__(self, initial: T):
        self._value = initial
        self._subscribers: list[Subscription[T]] = []

    @property
    def value(self) -> T:
        return self._value

    def publish(self, value: T):
        self._value = value
        for sub in self._subscribers:
            sub._push(value)

    def subscribe(self) -> Subscription[T]:
        sub = Subscription(self, self._value)
        self._subscribers.append(sub)
        return sub

    def _unsubscribe(self, sub: Subscription[T]):
        if sub in self._subscribers:
            self._subscribers.remove(sub)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
