"""Unit tests for PostView."""

import asyncio

import httpx
import pytest

from discussion.adapter.error import EventSourceError
from discussion.adapter.stream import HttpEventSource, InMemoryEventSource
from discussion.application.post_view import PostView
from discussion.application.stream import RetryPolicy, StreamState
from discussion.domain.error import TerminalStreamFailure, ViewClosedError
from discussion.domain.model import RequestPost
from discussion.domain.service import Reconciler
from discussion.domain.value import CommentSortType
from tests.factories import POST_ID, comment_data, snapshot_message


class FailingSendSource(InMemoryEventSource):
    """In-memory source whose commands never get through."""

    async def send(self, command: RequestPost) -> None:
        raise EventSourceError("server unreachable")


async def _no_sleep(delay: float) -> None:
    return None


def _view(source: InMemoryEventSource, reconciler: Reconciler) -> PostView:
    return PostView(
        post_id=POST_ID,
        source=source,
        reconciler=reconciler,
        policy=RetryPolicy(),
        sleep=_no_sleep,
    )


def _root_ids(view: PostView) -> list[int]:
    return [node.comment.id for node in view.get_forest()]


def _http_source(handler) -> HttpEventSource:
    return HttpEventSource(
        base_url="http://lemmy.test",
        events_path="/api/v1/events",
        command_path="/api/v1/command",
        transport=httpx.MockTransport(handler),
    )


class TestOpen:
    """Tests for opening the view."""

    @pytest.mark.asyncio
    async def test_open_requests_the_post_once(self, reconciler: Reconciler):
        # Arrange
        source = InMemoryEventSource()
        view = _view(source, reconciler)

        # Act
        await view.open()
        await view.open()

        # Assert
        assert source.sent == [RequestPost(post_id=POST_ID)]
        await view.close()

    @pytest.mark.asyncio
    async def test_snapshot_fills_the_view(self, reconciler: Reconciler):
        # Arrange
        source = InMemoryEventSource()
        source.push(
            snapshot_message(
                comments=[
                    comment_data(1, score=5),
                    comment_data(2, parent_id=1, score=10),
                ]
            )
        )
        source.finish()
        view = _view(source, reconciler)

        # Act
        await view.open()
        await view.wait()

        # Assert
        assert view.get_post().id == POST_ID
        assert view.get_community().name == "biology"
        assert [m.user_id for m in view.get_moderators()] == [7]
        assert _root_ids(view) == [1]
        assert view.get_forest()[0].children[0].comment.id == 2
        assert view.state == StreamState.COMPLETED

    @pytest.mark.asyncio
    async def test_open_after_close_raises(self, reconciler: Reconciler):
        # Arrange
        view = _view(InMemoryEventSource(), reconciler)
        await view.close()

        # Act / Assert
        with pytest.raises(ViewClosedError):
            await view.open()

    @pytest.mark.asyncio
    async def test_failed_request_closes_the_view(self, reconciler: Reconciler):
        """If GetPost can't be sent, the view is torn down and the error surfaces."""
        # Arrange
        view = _view(FailingSendSource(), reconciler)

        # Act
        with pytest.raises(EventSourceError):
            await view.open()

        # Assert
        assert view.closed is True
        assert view.state == StreamState.CLOSED
        assert reconciler.store.invalidated is True

    @pytest.mark.asyncio
    async def test_async_context_manager_opens_and_closes(
        self, reconciler: Reconciler
    ):
        source = InMemoryEventSource()

        async with _view(source, reconciler) as view:
            assert len(source.sent) == 1

        assert view.closed is True


class TestOpenOrdering:
    """Tests for when the post request goes out."""

    @pytest.mark.asyncio
    async def test_request_is_sent_after_the_stream_is_connected(
        self, reconciler: Reconciler
    ):
        """The GET subscription is accepted before the GetPost command is POSTed."""
        # Arrange
        requests: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request.method)
            if request.method == "GET":
                return httpx.Response(200, content=b"")
            return httpx.Response(202)

        source = _http_source(handler)
        view = _view(source, reconciler)

        # Act
        await view.open()
        await view.wait()

        # Assert
        assert requests == ["GET", "POST"]
        await view.close()
        await source.close()

    @pytest.mark.asyncio
    async def test_nothing_is_sent_when_the_stream_never_connects(
        self, reconciler: Reconciler
    ):
        # Arrange
        requests: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request.method)
            if request.method == "GET":
                return httpx.Response(503)
            return httpx.Response(202)

        source = _http_source(handler)
        view = PostView(
            post_id=POST_ID,
            source=source,
            reconciler=reconciler,
            policy=RetryPolicy(max_attempts=0),
            sleep=_no_sleep,
        )

        # Act
        await view.open()
        await view.wait()

        # Assert
        assert requests == ["GET"]
        assert view.state == StreamState.FAILED
        await view.close()
        await source.close()


class TestLiveUpdates:
    """Tests for events arriving after the snapshot."""

    @pytest.mark.asyncio
    async def test_created_comments_are_newest_first(self, reconciler: Reconciler):
        # Arrange
        source = InMemoryEventSource()
        source.push(
            snapshot_message(comments=[comment_data(1)]),
            {"op": "CreateComment", "comment": comment_data(2)},
            {"op": "CreateComment", "comment": comment_data(3, parent_id=1)},
        )
        source.finish()
        view = _view(source, reconciler)

        # Act
        await view.open()
        await view.wait()

        # Assert
        assert [c.id for c in view.recent_comments()] == [3, 2, 1]

    @pytest.mark.asyncio
    async def test_error_events_reach_error_handlers(self, reconciler: Reconciler):
        # Arrange
        source = InMemoryEventSource()
        source.push(
            snapshot_message(comments=[comment_data(1)]),
            {"op": "EditComment", "error": "couldnt_update_comment"},
        )
        source.finish()
        errors: list[str] = []
        view = _view(source, reconciler)
        view.on_event_error(errors.append)

        # Act
        await view.open()
        await view.wait()

        # Assert
        assert errors == ["couldnt_update_comment"]
        assert _root_ids(view) == [1]

    @pytest.mark.asyncio
    async def test_raising_error_handler_doesnt_stop_the_stream(
        self, reconciler: Reconciler
    ):
        # Arrange
        source = InMemoryEventSource()
        source.push(
            {"op": "GetPost", "error": "couldnt_find_post"},
            snapshot_message(comments=[comment_data(1)]),
        )
        source.finish()
        view = _view(source, reconciler)

        def broken(error: str) -> None:
            raise RuntimeError("handler bug")

        view.on_event_error(broken)

        # Act
        await view.open()
        await view.wait()

        # Assert
        assert view.state == StreamState.COMPLETED
        assert _root_ids(view) == [1]

    @pytest.mark.asyncio
    async def test_event_that_fails_to_apply_is_skipped(
        self, reconciler: Reconciler, monkeypatch: pytest.MonkeyPatch
    ):
        """An exception while applying one event leaves the stream running."""
        # Arrange
        source = InMemoryEventSource()
        source.push(
            snapshot_message(comments=[comment_data(1)]),
            {"op": "CreateComment", "comment": comment_data(2)},
            {"op": "CreateComment", "comment": comment_data(3)},
        )
        source.finish()
        apply = reconciler.apply
        calls: list[object] = []

        def crash_on_second(event):
            calls.append(event)
            if len(calls) == 2:
                raise RuntimeError("reconcile bug")
            return apply(event)

        monkeypatch.setattr(reconciler, "apply", crash_on_second)
        view = _view(source, reconciler)

        # Act
        await view.open()
        await view.wait()

        # Assert
        assert view.state == StreamState.COMPLETED
        assert len(calls) == 3
        assert [c.id for c in view.recent_comments()] == [3, 1]


class TestSortMode:
    @pytest.mark.asyncio
    async def test_set_sort_mode_resorts_immediately(self, reconciler: Reconciler):
        # Arrange
        source = InMemoryEventSource()
        source.push(
            snapshot_message(
                comments=[
                    comment_data(1, score=1, published="2019-04-01T11:00:00"),
                    comment_data(2, score=9, published="2019-04-01T10:00:00"),
                ]
            )
        )
        source.finish()
        view = _view(source, reconciler)
        await view.open()
        await view.wait()
        assert _root_ids(view) == [2, 1]

        # Act
        view.set_sort_mode("new")

        # Assert
        assert view.sort_mode == CommentSortType.NEW
        assert _root_ids(view) == [1, 2]


class TestFailureAndTeardown:
    @pytest.mark.asyncio
    async def test_terminal_failure_keeps_last_state(self, reconciler: Reconciler):
        """After the retry bound is exhausted the last reconciled forest stays."""
        # Arrange
        source = InMemoryEventSource()
        source.push(snapshot_message(comments=[comment_data(1), comment_data(2)]))
        source.fail(times=11)
        failures: list[TerminalStreamFailure] = []
        view = _view(source, reconciler)
        view.on_terminal_failure(failures.append)

        # Act
        await view.open()
        await view.wait()

        # Assert
        assert view.state == StreamState.FAILED
        assert failures[0].attempts == 10
        assert sorted(_root_ids(view)) == [1, 2]
        assert view.get_post() is not None

    @pytest.mark.asyncio
    async def test_close_freezes_the_view(self, reconciler: Reconciler):
        """Events queued after close never change the state."""
        # Arrange
        source = InMemoryEventSource()
        source.push(snapshot_message(comments=[comment_data(1, score=1)]))
        view = _view(source, reconciler)
        await view.open()
        await asyncio.sleep(0)
        assert _root_ids(view) == [1]

        # Act
        await view.close()
        await view.close()
        source.push({"op": "CreateComment", "comment": comment_data(2)})
        await asyncio.sleep(0)

        # Assert
        assert _root_ids(view) == [1]
        assert view.closed is True
        assert view.state == StreamState.CLOSED
