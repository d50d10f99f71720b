"""Non-fatal conditions reported while reconciling events.

Neither condition interrupts processing; both are logged and returned to
the caller so stale or partial server state can be observed.
"""

from typing import Literal

from discussion.domain.value.common import ValueObject
from discussion.domain.value.identifiers import CommentId


class NotFound(ValueObject):
    """A patch targeted an entity that is not in the store."""

    kind: Literal["not_found"] = "not_found"
    resource: str  # "post", "comment" or "community"
    identifier: str


class OrphanParent(ValueObject):
    """A comment's parent could not be resolved; the comment became a root."""

    kind: Literal["orphan_parent"] = "orphan_parent"
    comment_id: CommentId
    parent_id: CommentId


Condition = NotFound | OrphanParent
