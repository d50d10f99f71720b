"""Comment tree construction."""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Sequence

import logfire

from discussion.domain.model import Comment, CommentNode, Forest
from discussion.domain.value import CommentId, OrphanParent

from .base import Service


@dataclass
class TreeBuildResult:
    """Forest in arrival order plus the orphans promoted to roots."""

    forest: Forest
    orphans: list[OrphanParent] = field(default_factory=list)


class TreeBuilder(Service):
    """Builds the comment forest from the flat, parent-linked collection."""

    def build(self, comments: Sequence[Comment]) -> TreeBuildResult:
        """Build the comment forest.

        Algorithm:
        1. Index comments by id (first occurrence wins)
        2. Attach every comment to its parent's child list; comments without
           a parent are roots
        3. A comment whose parent is missing, or is itself, becomes a root
           and is reported as an orphan
        4. Materialize nodes depth-first from the roots, with an explicit
           stack so reply chains of any depth are safe
        5. Comments still unreached belong to a parent cycle; each cycle is
           broken by promoting its first comment (arrival order) to a root

        Siblings keep arrival order; sorting is a separate step.

        Args:
            comments: Flat comment collection

        Returns:
            Forest plus reported orphans
        """
        with logfire.span("tree_builder.build", comment_count=len(comments)):
            by_id: dict[CommentId, Comment] = {}
            for comment in comments:
                by_id.setdefault(comment.id, comment)

            # Build adjacency map: parent_id -> [children]
            adjacency: dict[CommentId, list[Comment]] = defaultdict(list)
            roots: list[Comment] = []
            orphans: list[OrphanParent] = []

            for comment in by_id.values():
                parent_id = comment.parent_id
                if parent_id is None:
                    roots.append(comment)
                elif parent_id in by_id and parent_id != comment.id:
                    adjacency[parent_id].append(comment)
                else:
                    orphans.append(self._orphan(comment))
                    roots.append(comment)

            seen: set[CommentId] = set()

            def build_subtree(root: Comment) -> CommentNode:
                """Materialize the subtree under ``root`` without recursion.

                Frames hold (comment, pending children, finished child nodes);
                a node is created once all of its children are finished.
                """
                seen.add(root.id)
                stack = [(root, iter(adjacency.get(root.id, ())), [])]
                while True:
                    comment, pending, finished = stack[-1]
                    child = next((c for c in pending if c.id not in seen), None)
                    if child is not None:
                        seen.add(child.id)
                        stack.append((child, iter(adjacency.get(child.id, ())), []))
                        continue

                    stack.pop()
                    node = CommentNode(comment=comment, children=tuple(finished))
                    if not stack:
                        return node
                    stack[-1][2].append(node)

            forest = [build_subtree(root) for root in roots]

            for comment in by_id.values():
                if comment.id not in seen:
                    orphans.append(self._orphan(comment, cycle=True))
                    forest.append(build_subtree(comment))

            logfire.debug(
                "Built comment tree", root_count=len(forest), orphan_count=len(orphans)
            )
            return TreeBuildResult(forest=tuple(forest), orphans=orphans)

    @staticmethod
    def _orphan(comment: Comment, cycle: bool = False) -> OrphanParent:
        logfire.warn(
            "Orphan comment promoted to root",
            comment_id=comment.id,
            parent_id=comment.parent_id,
            cycle=cycle,
        )
        return OrphanParent(comment_id=comment.id, parent_id=comment.parent_id)
