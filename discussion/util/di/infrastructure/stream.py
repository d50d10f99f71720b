"""Event source infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide

from discussion.adapter.stream import EventSource, HttpEventSource
from discussion.config import SourceSettings
from discussion.util.di.base import ProviderBase


class EventSourceProvider(ProviderBase):
    """Event source component base."""

    __mock_component__ = "stream"


class ProdEventSourceProvider(EventSourceProvider):
    """Production event source provider using HTTP streaming."""

    __is_mock__ = False

    @provide(scope=Scope.REQUEST)
    async def get_event_source(
        self, source_settings: SourceSettings
    ) -> AsyncIterator[EventSource]:
        """Provide an event source for one post view.

        The underlying HTTP client is closed when the view's scope exits.
        """
        source = HttpEventSource(
            base_url=source_settings.base_url,
            events_path=source_settings.events_path,
            command_path=source_settings.command_path,
            timeout_seconds=source_settings.timeout_seconds,
        )
        try:
            yield source
        finally:
            await source.close()
