"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from discussion.config import RankingSettings, Settings, SourceSettings, StreamSettings
from discussion.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide(scope=Scope.APP)
    def provide_source_settings(self, settings: Settings) -> SourceSettings:
        """Provide event source settings."""
        return settings.source

    @provide(scope=Scope.APP)
    def provide_stream_settings(self, settings: Settings) -> StreamSettings:
        """Provide stream retry settings."""
        return settings.stream

    @provide(scope=Scope.APP)
    def provide_ranking_settings(self, settings: Settings) -> RankingSettings:
        """Provide ranking settings."""
        return settings.ranking
