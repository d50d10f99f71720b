"""Test configuration and fixtures."""

import logfire
import pytest

from discussion.config import RankingSettings
from discussion.domain.service import CommentRanker, Reconciler, StateStore, TreeBuilder
from discussion.domain.value import CommentSortType
from tests.factories import FIXED_NOW

# Keep test output free of telemetry
logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
def ranker() -> CommentRanker:
    """Comment ranker with default constants and a frozen clock."""
    return CommentRanker(ranking_settings=RankingSettings(), clock=lambda: FIXED_NOW)


@pytest.fixture
def reconciler(ranker: CommentRanker) -> Reconciler:
    """Reconciler over a fresh store, sorting by Top."""
    return Reconciler(
        store=StateStore(),
        tree_builder=TreeBuilder(),
        ranker=ranker,
        sort=CommentSortType.TOP,
    )
