"""Commands sent to the server."""

from typing import Any

from discussion.domain.value import PostId, UserOperation
from discussion.domain.value.common import ValueObject


class RequestPost(ValueObject):
    """Ask the server for the full state of a post.

    The answer arrives on the event stream as a GetPost message.
    """

    post_id: PostId

    @property
    def op(self) -> UserOperation:
        return UserOperation.GET_POST

    def to_message(self) -> dict[str, Any]:
        """Serialize to the wire format."""
        return {"op": self.op.value, "data": {"id": self.post_id}}
