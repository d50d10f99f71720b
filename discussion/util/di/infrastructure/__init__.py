"""Infrastructure providers."""

# Import bases
from .stream import EventSourceProvider

# Import implementations (needed for __subclasses__())
from .stream import ProdEventSourceProvider  # noqa: F401

__all__ = [
    "EventSourceProvider",
    "ProdEventSourceProvider",
]
