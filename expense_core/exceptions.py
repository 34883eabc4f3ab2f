"""Domain-specific exceptions for the expense tracker core services."""

class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class NotFoundError(LookupError):
    """Raised when an expense record cannot be located."""


class InvalidDataError(ValueError):
    """Raised when a persisted record cannot be turned back into an expense."""


class PersistenceError(IOError):
    """Raised when the persistence layer encounters unrecoverable issues."""
