"""Infrastructure resilience package - retry with exponential backoff."""

from .config import RetryConfig
from .exceptions import MaxRetriesExceededError, RetryError
from .strategy import ExponentialBackoffStrategy

__all__: list[str] = [
    "RetryConfig",
    "RetryError",
    "MaxRetriesExceededError",
    "ExponentialBackoffStrategy",
]
