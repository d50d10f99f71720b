"""Unit tests for HttpEventSource."""

import json

import httpx
import pytest

from discussion.adapter.error import EventSourceError
from discussion.adapter.stream import HttpEventSource
from discussion.domain.model import RequestPost


def _source(handler) -> HttpEventSource:
    return HttpEventSource(
        base_url="http://lemmy.test",
        events_path="/api/v1/events",
        command_path="/api/v1/command",
        transport=httpx.MockTransport(handler),
    )


async def _collect(source: HttpEventSource) -> list[dict]:
    return [message async for message in source.subscribe()]


class TestSend:
    """Tests for sending commands."""

    @pytest.mark.asyncio
    async def test_posts_command_as_json(self):
        # Arrange
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(202)

        source = _source(handler)

        # Act
        await source.send(RequestPost(post_id=5))

        # Assert
        assert requests[0].method == "POST"
        assert requests[0].url.path == "/api/v1/command"
        assert json.loads(requests[0].content) == {"op": "GetPost", "data": {"id": 5}}
        await source.close()

    @pytest.mark.asyncio
    async def test_server_error_raises_event_source_error(self):
        source = _source(lambda request: httpx.Response(503))

        with pytest.raises(EventSourceError):
            await source.send(RequestPost(post_id=5))

        await source.close()

    @pytest.mark.asyncio
    async def test_connection_error_raises_event_source_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        source = _source(handler)

        with pytest.raises(EventSourceError):
            await source.send(RequestPost(post_id=5))

        await source.close()


class TestSubscribe:
    """Tests for reading the event stream."""

    @pytest.mark.asyncio
    async def test_yields_one_message_per_line(self):
        """Blank keep-alive lines are skipped."""
        # Arrange
        body = b'{"op": "GetPost", "post": {}}\n\n{"op": "EditPost"}\n'
        source = _source(lambda request: httpx.Response(200, content=body))

        # Act
        messages = await _collect(source)

        # Assert
        assert [m["op"] for m in messages] == ["GetPost", "EditPost"]
        await source.close()

    @pytest.mark.asyncio
    async def test_undecodable_line_becomes_error_message(self):
        """A garbled line doesn't end the stream."""
        # Arrange
        body = b'{"op": "GetPost"\n[1, 2]\n{"op": "EditPost"}\n'
        source = _source(lambda request: httpx.Response(200, content=body))

        # Act
        messages = await _collect(source)

        # Assert
        assert messages[0]["op"] is None
        assert messages[0]["error"].startswith("Invalid JSON")
        assert messages[1] == {"op": None, "error": "Event is not a JSON object"}
        assert messages[2] == {"op": "EditPost"}
        await source.close()

    @pytest.mark.asyncio
    async def test_http_error_status_raises_event_source_error(self):
        source = _source(lambda request: httpx.Response(502))

        with pytest.raises(EventSourceError):
            await _collect(source)

        await source.close()

    @pytest.mark.asyncio
    async def test_requests_the_events_path(self):
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(200, content=b"")

        source = _source(handler)

        assert await _collect(source) == []
        assert paths == ["/api/v1/events"]
        await source.close()
