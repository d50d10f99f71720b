"""Applies server events to the state store and re-derives the comment forest."""

from typing import Callable

import logfire
from pydantic import Field

from discussion.domain.model import (
    Comment,
    CommentCreated,
    CommentEdited,
    CommentVoted,
    Community,
    CommunityEdited,
    CommunityFollowed,
    ErrorEvent,
    Event,
    Forest,
    InitialSnapshot,
    Post,
    PostEdited,
    PostVoted,
    UnhandledEvent,
)
from discussion.domain.value import CommentSortType, Condition, NotFound
from discussion.domain.value.common import ValueObject

from .base import Service
from .comment_ranker import CommentRanker
from .state_store import StateStore
from .tree_builder import TreeBuilder


class ReconcileResult(ValueObject):
    """Outcome of applying one event."""

    op: str | None
    applied: bool
    conditions: list[Condition] = Field(default_factory=list)
    error: str | None = None


class Reconciler(Service):
    """Domain service reconciling the post view with server events.

    Every state event patches the store and then rebuilds and re-sorts the
    forest, even when the patch was a no-op. Error and unhandled events
    touch nothing. ``apply`` is synchronous, so events are applied strictly
    one at a time in the order they are given.
    """

    def __init__(
        self,
        store: StateStore,
        tree_builder: TreeBuilder,
        ranker: CommentRanker,
        sort: CommentSortType = CommentSortType.HOT,
    ) -> None:
        """Initialize reconciler.

        Args:
            store: State store for this view
            tree_builder: Comment tree builder
            ranker: Comment ranker
            sort: Initial comment ordering
        """
        self.store = store
        self.tree_builder = tree_builder
        self.ranker = ranker
        self._sort = CommentSortType(sort)
        self._forest: Forest = ()
        self._handlers: dict[type, Callable[..., list[Condition]]] = {
            InitialSnapshot: self._apply_snapshot,
            CommentCreated: self._apply_comment_created,
            CommentEdited: self._apply_comment_edited,
            CommentVoted: self._apply_comment_voted,
            PostVoted: self._apply_post_voted,
            PostEdited: self._apply_post_edited,
            CommunityEdited: self._apply_community_edited,
            CommunityFollowed: self._apply_community_followed,
        }

    @property
    def forest(self) -> Forest:
        """Current sorted comment forest."""
        return self._forest

    @property
    def sort_mode(self) -> CommentSortType:
        return self._sort

    def set_sort_mode(self, sort: CommentSortType) -> Forest:
        """Change the ordering and re-sort the existing forest.

        The tree structure is unchanged, so the tree is not rebuilt.

        Args:
            sort: New ordering

        Returns:
            Re-sorted forest
        """
        self._sort = CommentSortType(sort)
        with logfire.span("reconciler.set_sort_mode", sort=self._sort.value):
            self._forest = self.ranker.sort(self._forest, self._sort)
        return self._forest

    def apply(self, event: Event) -> ReconcileResult:
        """Apply one event.

        Never raises for stale, partial or erroneous events: those come back
        as conditions or an error on the result.

        Args:
            event: Decoded server event

        Returns:
            What happened
        """
        op = getattr(event, "op", None)
        with logfire.span("reconciler.apply", op=op):
            if self.store.invalidated:
                logfire.debug("Event ignored, view torn down", op=op)
                return ReconcileResult(op=op, applied=False)

            if isinstance(event, ErrorEvent):
                logfire.error("Server reported an error", op=op, error=event.error)
                return ReconcileResult(op=op, applied=False, error=event.error)

            if isinstance(event, UnhandledEvent):
                logfire.debug("Event not consumed by post view", op=op)
                return ReconcileResult(op=op, applied=False)

            conditions = self._handlers[type(event)](event)
            applied = not any(isinstance(c, NotFound) for c in conditions)
            conditions = conditions + self.refresh()

            logfire.info(
                "Event reconciled",
                op=op,
                applied=applied,
                condition_count=len(conditions),
            )
            return ReconcileResult(op=op, applied=applied, conditions=conditions)

    def refresh(self) -> list[Condition]:
        """Rebuild the forest from the store and sort it.

        Returns:
            Orphans found while building
        """
        result = self.tree_builder.build(self.store.comments)
        self._forest = self.ranker.sort(result.forest, self._sort)
        return list(result.orphans)

    def _apply_snapshot(self, event: InitialSnapshot) -> list[Condition]:
        self.store.replace_all(
            post=event.post,
            comments=event.comments,
            community=event.community,
            moderators=event.moderators,
        )
        return []

    def _apply_comment_created(self, event: CommentCreated) -> list[Condition]:
        post = self.store.post
        comment = event.comment
        if (
            post is not None
            and comment.post_id is not None
            and comment.post_id != post.id
        ):
            logfire.warn(
                "Comment belongs to another post",
                comment_id=comment.id,
                post_id=comment.post_id,
                viewed_post_id=post.id,
            )
            return [NotFound(resource="post", identifier=str(comment.post_id))]

        self.store.insert_comment(comment)
        return []

    def _apply_comment_edited(self, event: CommentEdited) -> list[Condition]:
        edit = event.comment

        def apply_edit(comment: Comment) -> None:
            comment.content = edit.content
            comment.updated = edit.updated

        if self.store.patch_comment(edit.id, apply_edit) is None:
            return [NotFound(resource="comment", identifier=str(edit.id))]
        return []

    def _apply_comment_voted(self, event: CommentVoted) -> list[Condition]:
        vote = event.comment

        def apply_vote(comment: Comment) -> None:
            comment.score = vote.score
            comment.upvotes = vote.upvotes
            comment.downvotes = vote.downvotes
            # Null means the vote came from another user: keep ours
            if vote.my_vote is not None:
                comment.my_vote = vote.my_vote

        if self.store.patch_comment(vote.id, apply_vote) is None:
            return [NotFound(resource="comment", identifier=str(vote.id))]
        return []

    def _apply_post_voted(self, event: PostVoted) -> list[Condition]:
        vote = event.post

        def apply_vote(post: Post) -> None:
            post.score = vote.score
            post.upvotes = vote.upvotes
            post.downvotes = vote.downvotes
            post.my_vote = vote.my_vote

        return self._patch_viewed_post(vote.id, apply_vote)

    def _apply_post_edited(self, event: PostEdited) -> list[Condition]:
        edited = event.post
        return self._patch_viewed_post(edited.id, lambda post: post.overwrite(edited))

    def _apply_community_edited(self, event: CommunityEdited) -> list[Condition]:
        edited = event.community
        conditions = self._patch_viewed_community(
            edited.id, lambda community: community.overwrite(edited)
        )
        if conditions:
            return conditions

        def apply_community(post: Post) -> None:
            post.community_id = edited.id
            post.community_name = edited.name

        # Loaded together with the community by the snapshot
        self.store.patch_post(apply_community)
        return []

    def _apply_community_followed(self, event: CommunityFollowed) -> list[Condition]:
        follow = event.community

        def apply_follow(community: Community) -> None:
            community.subscribed = follow.subscribed
            community.number_of_subscribers = follow.number_of_subscribers

        return self._patch_viewed_community(follow.id, apply_follow)

    def _patch_viewed_post(
        self, post_id: int, fn: Callable[[Post], None]
    ) -> list[Condition]:
        post = self.store.post
        if post is not None and post.id != post_id:
            logfire.warn(
                "Event for another post", post_id=post_id, viewed_post_id=post.id
            )
            return [NotFound(resource="post", identifier=str(post_id))]
        if self.store.patch_post(fn) is None:
            return [NotFound(resource="post", identifier=str(post_id))]
        return []

    def _patch_viewed_community(
        self, community_id: int, fn: Callable[[Community], None]
    ) -> list[Condition]:
        community = self.store.community
        if community is not None and community.id != community_id:
            logfire.warn(
                "Event for another community",
                community_id=community_id,
                viewed_community_id=community.id,
            )
            return [NotFound(resource="community", identifier=str(community_id))]
        if self.store.patch_community(fn) is None:
            return [NotFound(resource="community", identifier=str(community_id))]
        return []
