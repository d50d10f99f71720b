"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold the view's logic that doesn't belong to a single
    entity: storing state, deriving the comment tree, ranking, reconciling.
    """

    pass
