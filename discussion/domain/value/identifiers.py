"""Strongly typed identifiers for discussion entities.

The server assigns sequential integer ids; NewType keeps post, comment,
community and user ids from being mixed up.
"""

from typing import NewType

PostId = NewType("PostId", int)
CommentId = NewType("CommentId", int)
CommunityId = NewType("CommunityId", int)
UserId = NewType("UserId", int)
