"""Comment tree node."""

from dataclasses import dataclass
from typing import Iterator

from discussion.domain.model.comment import Comment


@dataclass(frozen=True)
class CommentNode:
    """Node in the comment tree.

    A projection of the flat comment collection: rebuilt on every change and
    never modified afterwards. Re-sorting produces new nodes.
    """

    comment: Comment
    children: tuple["CommentNode", ...] = ()

    def walk(self) -> Iterator["CommentNode"]:
        """Yield this node and all descendants depth-first, in display order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


Forest = tuple[CommentNode, ...]
