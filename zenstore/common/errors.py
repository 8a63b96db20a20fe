from typing import Dict, List, Optional


class StoreError(Exception):
    """Base class for domain errors raised by the store services."""


class InvalidInput(StoreError, ValueError):
    pass


class ValidationFailed(InvalidInput):
    """Form validation failure carrying per-field messages."""

    def __init__(self, errors: Dict[str, List[str]], message: str = "Validation failed. Please check the fields.") -> None:
        super().__init__(message)
        self.errors = errors
        self.message = message


class NotFound(StoreError, LookupError):
    pass


class TransactionFailed(StoreError):
    pass


class StaleOrder(StoreError):
    """The client's view of an image order no longer matches the database."""

    def __init__(self, expected: Optional[List[int]], actual: List[int]) -> None:
        super().__init__(f"image order changed: expected {expected}, found {actual}")
        self.expected = expected
        self.actual = actual
