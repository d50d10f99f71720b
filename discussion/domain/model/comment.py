"""Comment entity.

Comments arrive as a flat list; threading is expressed only through
parent_id and the tree is derived on demand.
"""

from typing import Optional

from pydantic import Field

from discussion.domain.model.common import DomainModel
from discussion.domain.value import CommentId, PostId, UserId


class Comment(DomainModel):
    """Comment entity.

    Timestamps are kept as the ISO-8601 strings the server sends, which
    sort lexically in chronological order.
    """

    id: CommentId
    post_id: Optional[PostId] = None
    creator_id: Optional[UserId] = None
    creator_name: Optional[str] = None
    parent_id: Optional[CommentId] = None
    content: str = ""
    removed: bool = False
    read: bool = False
    published: str
    updated: Optional[str] = None
    score: int = 0
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)
    my_vote: Optional[int] = None  # -1, 0 or 1 for the current user
