"""Event source port and HTTP implementation."""

import json
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Callable, Optional

import httpx
import logfire

from discussion.adapter.error import EventSourceError
from discussion.domain.model import RequestPost


class EventSource(ABC):
    """Ordered, bidirectional channel to the discussion server.

    Commands go out through ``send``; everything the server pushes,
    including answers to commands, arrives through ``subscribe``.
    """

    @abstractmethod
    async def send(self, command: RequestPost) -> None:
        """Send a command to the server.

        Args:
            command: Command to send

        Raises:
            EventSourceError: If the command could not be delivered
        """
        pass

    @abstractmethod
    def subscribe(
        self, on_open: Optional[Callable[[], None]] = None
    ) -> AsyncIterator[dict[str, Any]]:
        """Open a subscription to server messages.

        Yields decoded messages in delivery order until the server ends the
        stream.

        Args:
            on_open: Called once the server has accepted the subscription;
                messages it sends from then on will be delivered

        Raises:
            EventSourceError: If delivery fails
        """
        pass

    async def close(self) -> None:
        """Release transport resources."""
        pass


class HttpEventSource(EventSource):
    """Event source over HTTP.

    Events are read from a long-lived response streaming newline-delimited
    JSON; commands are POSTed as JSON objects.
    """

    def __init__(
        self,
        base_url: str,
        events_path: str,
        command_path: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize HTTP event source.

        Args:
            base_url: Server base URL
            events_path: Path of the event stream
            command_path: Path commands are POSTed to
            timeout_seconds: Connect/write/pool timeout
            transport: Optional transport override (for testing)
        """
        self.events_path = events_path
        self.command_path = command_path
        self._client = httpx.AsyncClient(
            base_url=base_url,
            # Events may be minutes apart: never time out waiting for one
            timeout=httpx.Timeout(timeout_seconds, read=None),
            transport=transport,
        )

    async def send(self, command: RequestPost) -> None:
        message = command.to_message()
        try:
            response = await self._client.post(self.command_path, json=message)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logfire.error("Command delivery failed", op=message["op"], error=str(e))
            raise EventSourceError(f"Failed to send {message['op']}: {e}") from e

        logfire.info("Command sent", op=message["op"])

    async def subscribe(
        self, on_open: Optional[Callable[[], None]] = None
    ) -> AsyncIterator[dict[str, Any]]:
        try:
            async with self._client.stream("GET", self.events_path) as response:
                response.raise_for_status()
                logfire.info("Event stream opened", path=self.events_path)
                if on_open is not None:
                    on_open()
                async for line in response.aiter_lines():
                    if not line.strip():
                        continue
                    yield _decode_line(line)
        except httpx.HTTPError as e:
            raise EventSourceError(f"Event stream failed: {e}") from e

    async def close(self) -> None:
        await self._client.aclose()


def _decode_line(line: str) -> dict[str, Any]:
    """Decode one NDJSON line; undecodable lines become error messages."""
    try:
        message = json.loads(line)
    except json.JSONDecodeError as e:
        logfire.warn("Undecodable event line", error=str(e))
        return {"op": None, "error": f"Invalid JSON in event stream: {e.msg}"}

    if not isinstance(message, dict):
        return {"op": None, "error": "Event is not a JSON object"}
    return message
