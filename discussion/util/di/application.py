"""Application layer DI providers."""

from dishka import Scope, provide

from discussion.adapter.stream import EventSource
from discussion.application.usecase.post import OpenPostViewUseCase
from discussion.config import StreamSettings
from discussion.domain.service import Reconciler
from discussion.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    scope = Scope.REQUEST

    @provide
    def get_open_post_view_use_case(
        self,
        event_source: EventSource,
        reconciler: Reconciler,
        stream_settings: StreamSettings,
    ) -> OpenPostViewUseCase:
        """Provide open post view use case."""
        return OpenPostViewUseCase(
            event_source=event_source,
            reconciler=reconciler,
            stream_settings=stream_settings,
        )
