"""Exponential backoff retry strategy."""
import time
from typing import Any, Callable, Optional, Tuple, Type

from hvprovision.infrastructure.logging.logger import get_logger
from hvprovision.infrastructure.resilience.config import RetryConfig
from hvprovision.infrastructure.resilience.exceptions import MaxRetriesExceededError

logger = get_logger(__name__)


class ExponentialBackoffStrategy:
    """
    Retry an operation on transient errors, doubling the delay between attempts.

    Only exceptions listed in ``retryable`` are retried; anything else
    propagates from the first attempt unchanged.
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or RetryConfig()
        self._sleep = sleep

    def delay_for(self, attempt: int) -> float:
        """Delay after the given zero-based attempt."""
        delay = self.config.base_delay * (self.config.backoff_multiplier ** attempt)
        return min(delay, self.config.max_delay)

    def execute(
        self,
        operation: Callable[..., Any],
        *args: Any,
        retryable: Tuple[Type[BaseException], ...] = (Exception,),
        operation_name: Optional[str] = None,
        **kwargs: Any,
    ) -> Any:
        name = operation_name or getattr(operation, "__name__", "operation")
        last_exception: Optional[BaseException] = None
        for attempt in range(self.config.max_attempts):
            try:
                return operation(*args, **kwargs)
            except retryable as e:
                last_exception = e
                if attempt + 1 >= self.config.max_attempts:
                    break
                delay = self.delay_for(attempt)
                logger.warning(
                    "Attempt failed, retrying",
                    operation=name,
                    attempt=attempt + 1,
                    delay=delay,
                    error=str(e),
                )
                self._sleep(delay)

        raise MaxRetriesExceededError(name, self.config.max_attempts, last_exception)
