"""Open post view use case."""

from typing import Optional

import logfire
from pydantic import BaseModel, Field

from discussion.adapter.stream import EventSource
from discussion.application.post_view import PostView
from discussion.application.stream import RetryPolicy, Sleep
from discussion.application.usecase.base import BaseUseCase
from discussion.config import StreamSettings
from discussion.domain.service import Reconciler
from discussion.domain.value import CommentSortType, PostId


class OpenPostViewRequest(BaseModel):
    """Open post view request."""

    post_id: int = Field(gt=0)
    sort: Optional[CommentSortType] = None  # keeps the configured default if None


class OpenPostViewUseCase(BaseUseCase):
    """Use case for opening a live view of a post."""

    def __init__(
        self,
        event_source: EventSource,
        reconciler: Reconciler,
        stream_settings: StreamSettings,
        sleep: Optional[Sleep] = None,
    ) -> None:
        """Initialize open post view use case.

        Args:
            event_source: Event source the view subscribes to
            reconciler: Reconciler owning the view's state
            stream_settings: Retry configuration
            sleep: Optional replacement for the retry delay (for testing)
        """
        self.event_source = event_source
        self.reconciler = reconciler
        self.stream_settings = stream_settings
        self.sleep = sleep

    async def execute(self, request: OpenPostViewRequest) -> PostView:
        """Execute open post view flow.

        Starts the subscription and requests the post; the view fills in
        as soon as the snapshot arrives.

        Args:
            request: Open post view request with post ID

        Returns:
            Opened post view; the caller owns it and must close it

        Raises:
            EventSourceError: If the post could not be requested
        """
        if request.sort is not None:
            self.reconciler.set_sort_mode(request.sort)

        view = PostView(
            post_id=PostId(request.post_id),
            source=self.event_source,
            reconciler=self.reconciler,
            policy=RetryPolicy.from_settings(self.stream_settings),
            sleep=self.sleep,
        )
        await view.open()

        logfire.info(
            "Post view opened",
            post_id=request.post_id,
            sort=view.sort_mode.value,
        )
        return view
