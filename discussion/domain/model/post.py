"""Post entity.

A post view always shows exactly one post; the community it belongs to is
denormalized onto it by the server.
"""

from typing import Optional

from pydantic import Field

from discussion.domain.model.common import DomainModel
from discussion.domain.value import CommunityId, PostId, UserId


class Post(DomainModel):
    """Post entity."""

    id: PostId
    name: str = ""
    url: Optional[str] = None
    body: Optional[str] = None
    creator_id: Optional[UserId] = None
    creator_name: Optional[str] = None
    community_id: CommunityId
    community_name: str = ""
    removed: bool = False
    locked: bool = False
    published: Optional[str] = None
    updated: Optional[str] = None
    number_of_comments: int = Field(default=0, ge=0)
    score: int = 0
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)
    my_vote: Optional[int] = None
