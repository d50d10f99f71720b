"""Infrastructure layer errors."""


class AdapterError(Exception):
    """Base infrastructure error."""

    pass


class EventSourceError(AdapterError):
    """Delivery from the event source failed; resubscribing may recover."""

    pass
