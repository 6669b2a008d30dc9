"""Domain errors for food supply tracking."""


class FoodTrackerError(Exception):
    """Base class for errors reported to the immediate caller."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequestError(FoodTrackerError):
    """Input is malformed or outside the accepted range."""


class NotFoundError(FoodTrackerError):
    """Record is missing or not owned by the caller."""


class ConflictError(FoodTrackerError):
    """Request conflicts with the current state of a record."""


class ActiveEntryExistsError(Exception):
    """Raised by storage when an active entry already exists for a category."""
