"""Errors raised by the budget tracker's services, storage and interfaces."""

class ValidationError(ValueError):
    """Raised when a record field or request parameter is invalid.

    Covers amounts, days of month, categories, frequencies and settings read
    from the environment. The API answers these with 400, the CLI with exit 1.
    """


class RecordNotFoundError(LookupError):
    """Raised by the API and CLI when an income, deduction or balance id is unknown."""


class PersistenceError(IOError):
    """Raised when a JSON record file cannot be read, parsed or written."""
