"""Dishka wiring for the post view engine."""

from typing import Type

from discussion.util.di.application import ProdApplicationProvider
from discussion.util.di.base import Component, ProviderBase
from discussion.util.di.core import ProdConfigProvider
from discussion.util.di.domain import ProdDomainProvider
from discussion.util.di.infrastructure import (
    EventSourceProvider,
    ProdEventSourceProvider,
)

# Bases with subclasses are swappable components; the rest are used directly
PROVIDERS: list[Type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    EventSourceProvider,
]


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Resolve ``base`` to the provider class the container should build.

    A base without subclasses is returned unchanged. Otherwise the subclass
    whose ``__is_mock__`` matches ``use_mock`` is picked, so the event source
    can be swapped for the in-memory one.

    Raises:
        ValueError: If ``base`` has no implementation of the requested kind
    """
    variants = base.__subclasses__()
    if not variants:
        return base

    chosen = next(
        (v for v in variants if getattr(v, "__is_mock__", False) == use_mock),
        None,
    )
    if chosen is None:
        kind = "mock" if use_mock else "production"
        component = getattr(base, "__mock_component__", base.__name__)
        raise ValueError(f"No {kind} implementation for {component}")
    return chosen


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    "EventSourceProvider",
    "ProdEventSourceProvider",
]
