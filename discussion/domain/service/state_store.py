"""Canonical in-memory state of one post view."""

from typing import Callable, Optional, Sequence

import logfire

from discussion.domain.model import Comment, Community, Moderator, Post
from discussion.domain.value import CommentId

from .base import Service


class StateStore(Service):
    """Holds the post, its flat comment collection, community and moderators.

    The flat comment list is the single source of truth for the comment
    tree. Entities are copied on the way in and patched in place afterwards,
    so a comment keeps its identity across edits and votes.

    Patches that target something missing are no-ops returning None; a late
    event may legitimately reference state a full snapshot has replaced.
    Once invalidated the store ignores every mutation.
    """

    def __init__(self) -> None:
        self._post: Optional[Post] = None
        self._community: Optional[Community] = None
        self._moderators: list[Moderator] = []
        # Arrival order, newest first for comments created after the snapshot
        self._comments: list[Comment] = []
        self._index: dict[CommentId, Comment] = {}
        self._invalidated = False

    @property
    def post(self) -> Optional[Post]:
        return self._post

    @property
    def community(self) -> Optional[Community]:
        return self._community

    @property
    def moderators(self) -> tuple[Moderator, ...]:
        return tuple(self._moderators)

    @property
    def comments(self) -> tuple[Comment, ...]:
        """Flat comment collection in arrival order."""
        return tuple(self._comments)

    @property
    def invalidated(self) -> bool:
        return self._invalidated

    def find_comment(self, comment_id: CommentId) -> Optional[Comment]:
        """Get a comment by ID.

        Args:
            comment_id: Comment ID

        Returns:
            Comment if present, None otherwise
        """
        return self._index.get(comment_id)

    def replace_all(
        self,
        post: Post,
        comments: Sequence[Comment],
        community: Community,
        moderators: Sequence[Moderator],
    ) -> bool:
        """Replace the whole state with a fresh snapshot.

        Duplicate comment ids keep their first occurrence.

        Args:
            post: The viewed post
            comments: All comments of the post, in server order
            community: Community the post belongs to
            moderators: Moderators of that community

        Returns:
            True if applied, False if the store is invalidated
        """
        if self._rejects("replace_all"):
            return False

        index: dict[CommentId, Comment] = {}
        ordered: list[Comment] = []
        for comment in comments:
            if comment.id in index:
                logfire.warn("Duplicate comment in snapshot", comment_id=comment.id)
                continue
            stored = comment.model_copy(deep=True)
            index[stored.id] = stored
            ordered.append(stored)

        self._post = post.model_copy(deep=True)
        self._community = community.model_copy(deep=True)
        self._moderators = [m.model_copy(deep=True) for m in moderators]
        self._comments = ordered
        self._index = index

        logfire.info(
            "State replaced",
            post_id=self._post.id,
            community_id=self._community.id,
            comment_count=len(ordered),
            moderator_count=len(self._moderators),
        )
        return True

    def insert_comment(self, comment: Comment) -> Optional[Comment]:
        """Add a newly created comment at the front of the collection.

        A comment whose id is already stored is merged into the existing
        record instead, keeping its position.

        Args:
            comment: The new comment

        Returns:
            The stored comment, or None if the store is invalidated
        """
        if self._rejects("insert_comment"):
            return None

        existing = self._index.get(comment.id)
        if existing is not None:
            existing.overwrite(comment)
            logfire.info("Comment already present, merged", comment_id=comment.id)
            return existing

        stored = comment.model_copy(deep=True)
        self._comments.insert(0, stored)
        self._index[stored.id] = stored
        logfire.debug(
            "Comment inserted", comment_id=stored.id, parent_id=stored.parent_id
        )
        return stored

    def patch_comment(
        self, comment_id: CommentId, fn: Callable[[Comment], None]
    ) -> Optional[Comment]:
        """Mutate a stored comment in place.

        Args:
            comment_id: Comment ID
            fn: Applies the changes to the comment

        Returns:
            Patched comment, or None if it doesn't exist or the store is invalidated
        """
        if self._rejects("patch_comment"):
            return None

        comment = self._index.get(comment_id)
        if comment is None:
            logfire.warn("Comment not found for patch", comment_id=comment_id)
            return None

        fn(comment)
        return comment

    def patch_post(self, fn: Callable[[Post], None]) -> Optional[Post]:
        """Mutate the post in place.

        Returns:
            Patched post, or None if no snapshot has arrived or the store is invalidated
        """
        if self._rejects("patch_post"):
            return None

        if self._post is None:
            logfire.warn("Post not loaded for patch")
            return None

        fn(self._post)
        return self._post

    def patch_community(
        self, fn: Callable[[Community], None]
    ) -> Optional[Community]:
        """Mutate the community in place.

        Returns:
            Patched community, or None if no snapshot has arrived or the store is invalidated
        """
        if self._rejects("patch_community"):
            return None

        if self._community is None:
            logfire.warn("Community not loaded for patch")
            return None

        fn(self._community)
        return self._community

    def invalidate(self) -> None:
        """Stop accepting mutations. Safe to call more than once."""
        if not self._invalidated:
            self._invalidated = True
            logfire.debug("State store invalidated")

    def _rejects(self, operation: str) -> bool:
        if self._invalidated:
            logfire.debug("Ignoring mutation of invalidated store", operation=operation)
        return self._invalidated
