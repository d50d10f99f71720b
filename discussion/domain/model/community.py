"""Community and moderator entities."""

from typing import Optional

from pydantic import Field

from discussion.domain.model.common import DomainModel
from discussion.domain.value import CommunityId, UserId


class Community(DomainModel):
    """Community entity.

    ``subscribed`` reflects the current user's follow state.
    """

    id: CommunityId
    name: str
    title: str = ""
    description: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    creator_id: Optional[UserId] = None
    creator_name: Optional[str] = None
    removed: bool = False
    published: Optional[str] = None
    updated: Optional[str] = None
    subscribed: bool = False
    number_of_subscribers: int = Field(default=0, ge=0)
    number_of_posts: int = Field(default=0, ge=0)
    number_of_comments: int = Field(default=0, ge=0)


class Moderator(DomainModel):
    """A user moderating a community."""

    id: int
    community_id: CommunityId
    community_name: Optional[str] = None
    user_id: UserId
    user_name: Optional[str] = None
    published: Optional[str] = None
