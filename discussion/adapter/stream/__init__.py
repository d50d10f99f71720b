"""Event source adapters."""

from .inmemory import InMemoryEventSource
from .source import EventSource, HttpEventSource

__all__ = [
    "EventSource",
    "HttpEventSource",
    "InMemoryEventSource",
]
