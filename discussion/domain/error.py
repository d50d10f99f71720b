"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ViewClosedError(DomainError):
    """Raised when a torn-down post view is asked to open again."""

    def __init__(self, post_id: int):
        self.post_id = post_id
        super().__init__(f"Post view {post_id} is closed")


class TerminalStreamFailure(DomainError):
    """The event stream failed permanently; no further events will arrive.

    Delivered to terminal-failure handlers rather than raised.
    """

    def __init__(self, attempts: int, last_error: BaseException | None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Event stream gave up after {attempts} failed attempt(s): {last_error}"
        )
