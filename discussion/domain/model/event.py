"""Server events consumed by a post view.

Every message is a JSON object tagged by ``op``. A non-null ``error`` field
overrides the tag: the message then reports a failure and carries no state.
Vote, edit and follow events only need a handful of fields, so their payloads
are partial models; any extra fields the server sends are ignored.
"""

from typing import Annotated, Any, Literal, Mapping, Optional, Union

import logfire
from pydantic import ConfigDict, Field, TypeAdapter, ValidationError

from discussion.domain.model.comment import Comment
from discussion.domain.model.community import Community, Moderator
from discussion.domain.model.post import Post
from discussion.domain.value import CommentId, CommunityId, PostId, UserOperation
from discussion.domain.value.common import ValueObject


class ServerMessage(ValueObject):
    """Base for decoded server messages."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class CommentEdit(ServerMessage):
    """Fields of an edited comment that the view applies."""

    id: CommentId
    content: str
    updated: Optional[str] = None


class CommentVote(ServerMessage):
    """Vote tallies of a comment.

    ``my_vote`` is null when the vote was cast by someone else; it means
    "unchanged", not "cleared".
    """

    id: CommentId
    score: int
    upvotes: int = Field(ge=0)
    downvotes: int = Field(ge=0)
    my_vote: Optional[int] = None


class PostVote(ServerMessage):
    """Vote tallies of a post."""

    id: PostId
    score: int
    upvotes: int = Field(ge=0)
    downvotes: int = Field(ge=0)
    my_vote: Optional[int] = None


class CommunityFollow(ServerMessage):
    """Follow state of a community."""

    id: CommunityId
    subscribed: bool
    number_of_subscribers: int = Field(ge=0)


class InitialSnapshot(ServerMessage):
    """Full state of the post view, answering a GetPost request."""

    op: Literal["GetPost"]
    post: Post
    comments: list[Comment] = []
    community: Community
    moderators: list[Moderator] = []


class CommentCreated(ServerMessage):
    op: Literal["CreateComment"]
    comment: Comment


class CommentEdited(ServerMessage):
    op: Literal["EditComment"]
    comment: CommentEdit


class CommentVoted(ServerMessage):
    op: Literal["CreateCommentLike"]
    comment: CommentVote


class PostVoted(ServerMessage):
    op: Literal["CreatePostLike"]
    post: PostVote


class PostEdited(ServerMessage):
    op: Literal["EditPost"]
    post: Post


class CommunityEdited(ServerMessage):
    op: Literal["EditCommunity"]
    community: Community


class CommunityFollowed(ServerMessage):
    op: Literal["FollowCommunity"]
    community: CommunityFollow


class ErrorEvent(ServerMessage):
    """The server reported an error, or the message could not be decoded."""

    op: Optional[str] = None
    error: str


class UnhandledEvent(ServerMessage):
    """A well-formed message for an operation this view does not consume."""

    op: Optional[str] = None


StateEvent = Annotated[
    Union[
        InitialSnapshot,
        CommentCreated,
        CommentEdited,
        CommentVoted,
        PostVoted,
        PostEdited,
        CommunityEdited,
        CommunityFollowed,
    ],
    Field(discriminator="op"),
]

Event = Union[
    InitialSnapshot,
    CommentCreated,
    CommentEdited,
    CommentVoted,
    PostVoted,
    PostEdited,
    CommunityEdited,
    CommunityFollowed,
    ErrorEvent,
    UnhandledEvent,
]

_STATE_EVENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(StateEvent)
_HANDLED_OPS = {operation.value for operation in UserOperation}


def parse_event(message: Any) -> Event:
    """Decode a raw server message into a typed event.

    Never raises: anything that cannot be decoded into a state event comes
    back as an ErrorEvent.

    Args:
        message: Decoded JSON message

    Returns:
        Typed event
    """
    if not isinstance(message, Mapping):
        return ErrorEvent(
            error=f"Malformed message: expected an object, got {type(message).__name__}"
        )

    op = message.get("op")
    op_name = str(op) if op is not None else None

    if message.get("error") is not None:
        return ErrorEvent(op=op_name, error=str(message["error"]))

    if op_name not in _HANDLED_OPS:
        return UnhandledEvent(op=op_name)

    try:
        return _STATE_EVENT_ADAPTER.validate_python(dict(message))
    except ValidationError as e:
        logfire.warn(
            "Malformed server message",
            op=op_name,
            error_count=e.error_count(),
            errors=str(e),
        )
        return ErrorEvent(
            op=op_name,
            error=f"Malformed {op_name} message: {e.error_count()} invalid field(s)",
        )
