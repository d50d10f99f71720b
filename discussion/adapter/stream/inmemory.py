"""In-memory event source for testing."""

import asyncio
from typing import Any, AsyncIterator, Callable, Optional

from discussion.adapter.error import EventSourceError
from discussion.domain.model import RequestPost

from .source import EventSource

_END = object()


class InMemoryEventSource(EventSource):
    """Queue-backed implementation of EventSource for testing.

    Messages, failures and end-of-stream markers are queued up front or
    while a subscription is running. A failure ends the current
    subscription; the next one continues with whatever is still queued.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self.sent: list[RequestPost] = []
        self.subscriptions = 0
        self.closed = False

    def push(self, *messages: dict[str, Any]) -> None:
        """Queue server messages."""
        for message in messages:
            self._queue.put_nowait(message)

    def fail(self, reason: str = "connection lost", times: int = 1) -> None:
        """Queue delivery failures."""
        for _ in range(times):
            self._queue.put_nowait(EventSourceError(reason))

    def finish(self) -> None:
        """Queue a normal end of stream."""
        self._queue.put_nowait(_END)

    async def send(self, command: RequestPost) -> None:
        self.sent.append(command)

    async def subscribe(
        self, on_open: Optional[Callable[[], None]] = None
    ) -> AsyncIterator[dict[str, Any]]:
        self.subscriptions += 1
        if on_open is not None:
            on_open()
        while True:
            item = await self._queue.get()
            if item is _END:
                return
            if isinstance(item, EventSourceError):
                raise item
            yield item

    async def close(self) -> None:
        self.closed = True
