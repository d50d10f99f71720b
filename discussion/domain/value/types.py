"""Domain value types for the discussion view."""

from enum import Enum


class CommentSortType(str, Enum):
    """Ordering applied to every level of the comment tree."""

    HOT = "hot"
    TOP = "top"
    NEW = "new"


class UserOperation(str, Enum):
    """Operation tags carried by server messages.

    Only the operations a post view consumes are listed; anything else the
    server broadcasts is treated as unhandled.
    """

    GET_POST = "GetPost"
    CREATE_COMMENT = "CreateComment"
    EDIT_COMMENT = "EditComment"
    CREATE_COMMENT_LIKE = "CreateCommentLike"
    CREATE_POST_LIKE = "CreatePostLike"
    EDIT_POST = "EditPost"
    EDIT_COMMUNITY = "EditCommunity"
    FOLLOW_COMMUNITY = "FollowCommunity"
