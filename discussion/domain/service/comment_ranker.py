"""Comment ordering: Hot, Top and New."""

import math
from datetime import datetime, timezone
from typing import Callable, Iterator, Sequence

import logfire

from discussion.config import RankingSettings
from discussion.domain.model import Comment, CommentNode, Forest
from discussion.domain.value import CommentSortType

from .base import Service

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime | None:
    """Parse a server timestamp; naive values are UTC."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class CommentRanker(Service):
    """Sorts a comment forest, applying the same ordering at every depth."""

    def __init__(
        self, ranking_settings: RankingSettings, clock: Clock = utc_now
    ) -> None:
        """Initialize comment ranker.

        Args:
            ranking_settings: Hot rank constants
            clock: Source of the current time for age calculation
        """
        self.settings = ranking_settings
        self.clock = clock

    def hot_rank(self, comment: Comment, now: datetime | None = None) -> float:
        """Time-decay rank of a comment.

        scale * log10(max(1, score + score_offset)) / (age_hours + time_offset)^gravity

        Non-decreasing in score at a fixed age and non-increasing in age at a
        fixed score. Ages are clamped at zero, so comments stamped slightly in
        the future (clock skew) rank as brand new; unparseable timestamps
        are treated the same way.

        Args:
            comment: Comment to rank
            now: Reference time (defaults to the clock)

        Returns:
            Rank, higher is hotter
        """
        if now is None:
            now = self.clock()
        published = parse_timestamp(comment.published)
        if published is None:
            logfire.debug(
                "Unparseable comment timestamp",
                comment_id=comment.id,
                published=comment.published,
            )
            age_hours = 0.0
        else:
            age_hours = max((now - published).total_seconds() / 3600, 0.0)

        magnitude = math.log10(max(1, comment.score + self.settings.score_offset))
        decay = (age_hours + self.settings.time_offset) ** self.settings.gravity
        return self.settings.scale * magnitude / decay

    def sort(self, forest: Sequence[CommentNode], sort: CommentSortType) -> Forest:
        """Sort every level of the forest with the same ordering.

        Returns new nodes; the input forest is left untouched. Ties keep
        their existing relative order.

        Args:
            forest: Forest to sort
            sort: Ordering to apply

        Returns:
            Sorted forest
        """
        key = self._sort_key(CommentSortType(sort))

        def ordered(nodes: Sequence[CommentNode]) -> Iterator[CommentNode]:
            return iter(sorted(nodes, key=lambda node: key(node.comment), reverse=True))

        # Depth-first with an explicit stack; deep reply chains must not
        # hit the recursion limit. Frames: (node, pending children, sorted children)
        roots: list[CommentNode] = []
        stack: list[tuple[CommentNode | None, Iterator[CommentNode], list[CommentNode]]]
        stack = [(None, ordered(forest), roots)]
        while stack:
            node, pending, finished = stack[-1]
            child = next(pending, None)
            if child is not None:
                stack.append((child, ordered(child.children), []))
                continue

            stack.pop()
            if node is not None:
                stack[-1][2].append(
                    CommentNode(comment=node.comment, children=tuple(finished))
                )

        return tuple(roots)

    def _sort_key(self, sort: CommentSortType) -> Callable[[Comment], float | str]:
        if sort == CommentSortType.TOP:
            return lambda comment: comment.score
        if sort == CommentSortType.NEW:
            # ISO-8601 strings order chronologically
            return lambda comment: comment.published
        # One reference time for the whole sort keeps the ordering consistent
        now = self.clock()
        return lambda comment: self.hot_rank(comment, now)
