"""Live view of one post and its comment tree."""

from typing import Any, Callable, Optional

import logfire

from discussion.adapter.error import EventSourceError
from discussion.adapter.stream import EventSource
from discussion.application.stream import (
    RetryPolicy,
    Sleep,
    StreamLifecycleManager,
    StreamState,
    TerminalFailureHandler,
)
from discussion.domain.error import ViewClosedError
from discussion.domain.model import (
    Comment,
    Community,
    Forest,
    Moderator,
    Post,
    RequestPost,
    parse_event,
)
from discussion.domain.service import Reconciler, ReconcileResult
from discussion.domain.value import CommentSortType, PostId

EventErrorHandler = Callable[[str], None]


class PostView:
    """Engine behind a post page.

    Subscribes to the event source, asks for the post once, and keeps a
    sorted comment forest in sync with whatever the server pushes. Callers
    only read state and issue ``set_sort_mode`` or ``close``; every mutation
    goes through the reconciler.

    Usage:
        view = PostView(post_id, source, reconciler, RetryPolicy())
        await view.open()
        view.set_sort_mode(CommentSortType.TOP)
        forest = view.get_forest()
        await view.close()
    """

    def __init__(
        self,
        post_id: PostId,
        source: EventSource,
        reconciler: Reconciler,
        policy: RetryPolicy,
        sleep: Optional[Sleep] = None,
    ) -> None:
        """Initialize post view.

        Args:
            post_id: Post to show
            source: Event source for this view
            reconciler: Reconciler owning this view's state
            policy: Retry policy for the subscription
            sleep: Optional replacement for the retry delay (for testing)
        """
        self.post_id = post_id
        self.source = source
        self.reconciler = reconciler
        self.stream = StreamLifecycleManager(source, self._deliver, policy, sleep)
        self._requested = False
        self._closed = False
        self._error_handlers: list[EventErrorHandler] = []

    async def open(self) -> None:
        """Subscribe and request the post.

        RequestPost is sent at most once per view, and only after the source
        has confirmed the subscription, so the answer can't be missed. If
        the stream ends before it ever subscribes, nothing is sent and the
        failure reaches the terminal-failure handlers instead.

        Raises:
            ViewClosedError: If the view was already closed
            EventSourceError: If the request could not be sent (the view is closed)
        """
        if self._closed:
            raise ViewClosedError(self.post_id)
        if self._requested:
            return

        with logfire.span("post_view.open", post_id=self.post_id):
            self.stream.start()
            self._requested = True
            if not await self.stream.wait_open():
                logfire.warn(
                    "Event stream ended before subscribing, post not requested",
                    post_id=self.post_id,
                    state=self.stream.state.value,
                )
                return
            if self._closed:
                return
            try:
                await self.source.send(RequestPost(post_id=self.post_id))
            except EventSourceError:
                await self.close()
                raise

    async def close(self) -> None:
        """Tear the view down. Idempotent.

        Nothing delivered afterwards can change the view's state.
        """
        if self._closed:
            return
        self._closed = True
        self.reconciler.store.invalidate()
        await self.stream.close()
        logfire.info("Post view closed", post_id=self.post_id)

    async def wait(self) -> None:
        """Wait until the event stream has ended for any reason."""
        await self.stream.wait()

    async def __aenter__(self) -> "PostView":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def state(self) -> StreamState:
        return self.stream.state

    @property
    def sort_mode(self) -> CommentSortType:
        return self.reconciler.sort_mode

    def set_sort_mode(self, mode: CommentSortType | str) -> None:
        """Re-sort the comment forest without waiting for new events."""
        self.reconciler.set_sort_mode(CommentSortType(mode))

    def get_forest(self) -> Forest:
        """Current sorted comment forest (immutable snapshot)."""
        return self.reconciler.forest

    def get_post(self) -> Optional[Post]:
        return self.reconciler.store.post

    def get_community(self) -> Optional[Community]:
        return self.reconciler.store.community

    def get_moderators(self) -> tuple[Moderator, ...]:
        return self.reconciler.store.moderators

    def recent_comments(self) -> tuple[Comment, ...]:
        """Comments in arrival order, newest created first."""
        return self.reconciler.store.comments

    def on_terminal_failure(self, handler: TerminalFailureHandler) -> None:
        """Call ``handler`` once if the event stream fails for good."""
        self.stream.on_terminal_failure(handler)

    def on_event_error(self, handler: EventErrorHandler) -> None:
        """Call ``handler`` with the message of every error event."""
        self._error_handlers.append(handler)

    def _deliver(self, message: dict[str, Any]) -> Optional[ReconcileResult]:
        if self._closed:
            return None

        try:
            result = self.reconciler.apply(parse_event(message))
        except Exception as e:
            # One bad event must not end the subscription
            logfire.exception(
                "Failed to apply event",
                post_id=self.post_id,
                op=message.get("op") if isinstance(message, dict) else None,
                error=str(e),
            )
            return None

        if result.error is not None:
            for handler in self._error_handlers:
                try:
                    handler(result.error)
                except Exception as e:
                    logfire.exception("Event error handler raised", error=str(e))
        return result
