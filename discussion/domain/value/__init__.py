"""Domain value objects for the discussion view."""

from discussion.domain.value.condition import Condition, NotFound, OrphanParent
from discussion.domain.value.identifiers import (
    CommentId,
    CommunityId,
    PostId,
    UserId,
)
from discussion.domain.value.types import CommentSortType, UserOperation

__all__ = [
    # Identifiers
    "PostId",
    "CommentId",
    "CommunityId",
    "UserId",
    # Types
    "CommentSortType",
    "UserOperation",
    # Conditions
    "Condition",
    "NotFound",
    "OrphanParent",
]
