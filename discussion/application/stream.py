"""Event stream subscription lifecycle."""

import asyncio
from contextlib import aclosing
from enum import Enum
from typing import Any, Awaitable, Callable

import logfire
from pydantic import Field

from discussion.adapter.error import EventSourceError
from discussion.adapter.stream import EventSource
from discussion.config import StreamSettings
from discussion.domain.error import TerminalStreamFailure
from discussion.domain.value.common import ValueObject

MessageHandler = Callable[[dict[str, Any]], object]
TerminalFailureHandler = Callable[[TerminalStreamFailure], None]
Sleep = Callable[[float], Awaitable[None]]


class RetryPolicy(ValueObject):
    """Fixed-delay retry with a bounded number of attempts.

    The bound covers the whole life of the subscription: a stream that keeps
    failing between deliveries still gives up. ``reset_on_delivery`` opts
    into counting only consecutive failures instead.
    """

    delay: float = Field(default=3.0, ge=0)  # seconds
    max_attempts: int = Field(default=10, ge=0)
    reset_on_delivery: bool = False

    @classmethod
    def from_settings(cls, settings: StreamSettings) -> "RetryPolicy":
        return cls(
            delay=settings.retry_delay_ms / 1000,
            max_attempts=settings.max_retries,
            reset_on_delivery=settings.reset_on_delivery,
        )

    def delay_for(self, attempt: int) -> float | None:
        """Delay before the given retry.

        Args:
            attempt: 1-based number of the failure being handled

        Returns:
            Seconds to wait, or None once the bound is exhausted
        """
        if attempt > self.max_attempts:
            return None
        return self.delay


class StreamState(str, Enum):
    """Lifecycle of a subscription."""

    IDLE = "idle"
    ACTIVE = "active"
    RETRYING = "retrying"
    COMPLETED = "completed"  # source ended the stream normally
    FAILED = "failed"  # retry bound exhausted
    CLOSED = "closed"  # torn down by the owner


class StreamLifecycleManager:
    """Owns the single subscription of a view to its event source.

    Messages are handed to ``handler`` one at a time in delivery order. A
    delivery error waits the policy's delay and resubscribes. When the policy
    gives up the stream ends for good and terminal-failure handlers run
    exactly once. ``wait_open`` lets a caller hold back commands until the
    source has confirmed the subscription, so replies can't be missed.
    """

    def __init__(
        self,
        source: EventSource,
        handler: MessageHandler,
        policy: RetryPolicy,
        sleep: Sleep | None = None,
    ) -> None:
        """Initialize stream lifecycle manager.

        Args:
            source: Event source to subscribe to
            handler: Receives every message; must not block
            policy: Retry policy for delivery errors
            sleep: Awaitable delay, asyncio.sleep unless replaced (for testing)
        """
        self.source = source
        self.handler = handler
        self.policy = policy
        self.sleep = sleep or asyncio.sleep
        self.state = StreamState.IDLE
        self.failure: TerminalStreamFailure | None = None
        self._task: asyncio.Task[None] | None = None
        self._opened = asyncio.Event()
        self._terminal_handlers: list[TerminalFailureHandler] = []

    @property
    def closed(self) -> bool:
        return self.state == StreamState.CLOSED

    def on_terminal_failure(self, handler: TerminalFailureHandler) -> None:
        """Register a handler for permanent stream failure.

        A handler registered after the failure happened is called right away.
        """
        if self.failure is not None:
            self._notify(handler, self.failure)
            return
        self._terminal_handlers.append(handler)

    def start(self) -> None:
        """Start the subscription task. Starting twice is a no-op."""
        if self._task is not None or self.closed:
            return
        self.state = StreamState.ACTIVE
        self._task = asyncio.create_task(self._run(), name="event-stream")

    async def wait_open(self) -> bool:
        """Wait until the source confirms the first subscription.

        Returns:
            True once subscribed, False if the stream ended (failed, closed
            or never started) before that happened
        """
        if self._task is None or self._opened.is_set():
            return self._opened.is_set()

        opened = asyncio.ensure_future(self._opened.wait())
        try:
            await asyncio.wait(
                {opened, self._task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            opened.cancel()
        return self._opened.is_set()

    async def wait(self) -> None:
        """Wait until the stream has completed, failed or been closed."""
        if self._task is not None:
            await asyncio.wait({self._task})

    async def close(self) -> None:
        """Tear the subscription down. Idempotent and immediate.

        After this returns no further message reaches the handler.
        """
        if self.closed:
            return
        self.state = StreamState.CLOSED
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logfire.info("Event stream closed")

    async def _run(self) -> None:
        attempt = 0
        last_error: BaseException | None = None
        while not self.closed:
            try:
                with logfire.span("stream.subscribe", attempt=attempt):
                    subscription = self.source.subscribe(on_open=self._mark_open)
                    async with aclosing(subscription) as messages:
                        async for message in messages:
                            if self.closed:
                                return
                            self.handler(message)
                            if self.policy.reset_on_delivery:
                                attempt = 0
                            if self.state == StreamState.RETRYING:
                                self.state = StreamState.ACTIVE
                if not self.closed:
                    self.state = StreamState.COMPLETED
                    logfire.info("Event stream completed")
                return
            except EventSourceError as e:
                attempt += 1
                last_error = e
                delay = self.policy.delay_for(attempt)
                if delay is None:
                    self._fail(TerminalStreamFailure(attempt - 1, last_error))
                    return
                self.state = StreamState.RETRYING
                logfire.warn(
                    "Event stream error, retrying",
                    attempt=attempt,
                    max_attempts=self.policy.max_attempts,
                    delay_seconds=delay,
                    error=str(e),
                )
                await self.sleep(delay)
            except Exception as e:
                logfire.exception("Event stream crashed", error=str(e))
                self._fail(TerminalStreamFailure(attempt, e))
                return

    def _mark_open(self) -> None:
        if not self._opened.is_set():
            logfire.debug("Event stream subscribed")
        self._opened.set()

    def _fail(self, failure: TerminalStreamFailure) -> None:
        if self.closed or self.failure is not None:
            return
        self.failure = failure
        self.state = StreamState.FAILED
        logfire.error(
            "Event stream failed permanently",
            retries=failure.attempts,
            error=str(failure.last_error),
        )
        handlers, self._terminal_handlers = self._terminal_handlers, []
        for handler in handlers:
            self._notify(handler, failure)

    @staticmethod
    def _notify(
        handler: TerminalFailureHandler, failure: TerminalStreamFailure
    ) -> None:
        try:
            handler(failure)
        except Exception as e:
            logfire.exception("Terminal failure handler raised", error=str(e))
