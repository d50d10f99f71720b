#!/usr/bin/env python3
"""Watch a post's comment tree live, logging a summary as it changes.

Usage:
    python scripts/watch_post.py <post_id> [hot|top|new]
"""

import asyncio
import sys

import logfire

from discussion.application.usecase.post import (
    OpenPostViewRequest,
    OpenPostViewUseCase,
)
from discussion.config import Settings
from discussion.domain.error import TerminalStreamFailure
from discussion.domain.value import CommentSortType
from discussion.util.di.container import create_container
from discussion.util.logging import setup_logging
from discussion.util.observability import configure_logfire, instrument_httpx

SUMMARY_INTERVAL_SECONDS = 5.0


async def watch(post_id: int, sort: CommentSortType | None) -> int:
    """Open the view and log its forest until the stream ends."""
    container = create_container()
    try:
        async with container() as view_container:
            use_case = await view_container.get(OpenPostViewUseCase)
            view = await use_case.execute(
                OpenPostViewRequest(post_id=post_id, sort=sort)
            )

            def report_failure(failure: TerminalStreamFailure) -> None:
                logfire.error("Giving up on post", post_id=post_id, error=str(failure))

            view.on_terminal_failure(report_failure)
            view.on_event_error(
                lambda error: logfire.warn("Server error", post_id=post_id, error=error)
            )

            async with view:
                waiter = asyncio.create_task(view.wait())
                while not waiter.done():
                    await asyncio.wait({waiter}, timeout=SUMMARY_INTERVAL_SECONDS)
                    post = view.get_post()
                    forest = view.get_forest()
                    logfire.info(
                        "Post view",
                        post_id=post_id,
                        title=post.name if post else None,
                        score=post.score if post else None,
                        roots=len(forest),
                        comments=sum(1 for root in forest for _ in root.walk()),
                        top_root=forest[0].comment.id if forest else None,
                        state=view.state.value,
                    )
                return 1 if view.stream.failure else 0
    finally:
        await container.close()


def main() -> int:
    """Parse arguments, configure observability and watch the post."""
    if len(sys.argv) < 2:
        print(__doc__)
        return 2

    post_id = int(sys.argv[1])
    sort = CommentSortType(sys.argv[2]) if len(sys.argv) > 2 else None

    settings = Settings()
    configure_logfire(settings)
    setup_logging(settings)
    instrument_httpx()

    try:
        return asyncio.run(watch(post_id, sort))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
