"""Retry exceptions."""


class RetryError(Exception):
    """Base exception for retry handling."""
    pass


class MaxRetriesExceededError(RetryError):
    """Raised when every attempt of an operation failed."""

    def __init__(self, operation: str, attempts: int, last_exception: Exception):
        super().__init__(f"{operation} failed after {attempts} attempts: {last_exception}")
        self.operation = operation
        self.attempts = attempts
        self.last_exception = last_exception
