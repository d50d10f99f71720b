"""Domain services."""

from .base import Service
from .comment_ranker import CommentRanker, parse_timestamp, utc_now
from .reconciler import ReconcileResult, Reconciler
from .state_store import StateStore
from .tree_builder import TreeBuilder, TreeBuildResult

__all__ = [
    "CommentRanker",
    "ReconcileResult",
    "Reconciler",
    "Service",
    "StateStore",
    "TreeBuildResult",
    "TreeBuilder",
    "parse_timestamp",
    "utc_now",
]
