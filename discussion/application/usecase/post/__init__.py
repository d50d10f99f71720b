"""Post use cases."""

from .open_post_view import OpenPostViewRequest, OpenPostViewUseCase

__all__ = [
    "OpenPostViewRequest",
    "OpenPostViewUseCase",
]
