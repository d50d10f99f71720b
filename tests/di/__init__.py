"""Mock providers for testing."""

from .stream import MockEventSourceProvider
from .container import build_test_container

__all__ = [
    "MockEventSourceProvider",
    "build_test_container",
]
