"""Domain layer DI providers."""

from dishka import Scope, provide

from discussion.config import RankingSettings, Settings
from discussion.domain.service import (
    CommentRanker,
    Reconciler,
    StateStore,
    TreeBuilder,
)
from discussion.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped: one request scope is one post view,
    so each view gets its own store and reconciler.
    """

    scope = Scope.REQUEST

    @provide
    def get_state_store(self) -> StateStore:
        """Provide an empty state store."""
        return StateStore()

    @provide
    def get_tree_builder(self) -> TreeBuilder:
        """Provide comment tree builder."""
        return TreeBuilder()

    @provide
    def get_comment_ranker(self, ranking_settings: RankingSettings) -> CommentRanker:
        """Provide comment ranker."""
        return CommentRanker(ranking_settings=ranking_settings)

    @provide
    def get_reconciler(
        self,
        store: StateStore,
        tree_builder: TreeBuilder,
        ranker: CommentRanker,
        settings: Settings,
    ) -> Reconciler:
        """Provide reconciler starting with the configured sort order."""
        return Reconciler(
            store=store,
            tree_builder=tree_builder,
            ranker=ranker,
            sort=settings.default_sort,
        )
