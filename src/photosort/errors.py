"""Error types shared across services and the API."""


class InvalidTransitionError(ValueError):
    """Raised when a workflow change is not reachable from the current state."""


class SelectionLockedError(InvalidTransitionError):
    """Raised when a client mutates a selection that is no longer open."""


class PartialBulkUpdateError(RuntimeError):
    """Raised when a bulk photo update did not touch every expected photo."""

    def __init__(self, expected: int, updated: int) -> None:
        super().__init__(f"Bulk update touched {updated} of {expected} photos")
        self.expected = expected
        self.updated = updated


class NotFoundError(LookupError):
    """Raised when an event, photo or comment does not exist."""


class PermissionDeniedError(PermissionError):
    """Raised when a viewer attempts an operation reserved for another role."""
