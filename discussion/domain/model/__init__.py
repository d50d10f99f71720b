"""Domain model entities for the discussion view."""

from discussion.domain.model.command import RequestPost
from discussion.domain.model.comment import Comment
from discussion.domain.model.comment_node import CommentNode, Forest
from discussion.domain.model.community import Community, Moderator
from discussion.domain.model.event import (
    CommentCreated,
    CommentEdited,
    CommentVoted,
    CommunityEdited,
    CommunityFollowed,
    ErrorEvent,
    Event,
    InitialSnapshot,
    PostEdited,
    PostVoted,
    UnhandledEvent,
    parse_event,
)
from discussion.domain.model.post import Post

__all__ = [
    "Post",
    "Comment",
    "Community",
    "Moderator",
    "CommentNode",
    "Forest",
    "RequestPost",
    # Events
    "Event",
    "InitialSnapshot",
    "CommentCreated",
    "CommentEdited",
    "CommentVoted",
    "PostVoted",
    "PostEdited",
    "CommunityEdited",
    "CommunityFollowed",
    "ErrorEvent",
    "UnhandledEvent",
    "parse_event",
]
