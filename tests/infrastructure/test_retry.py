from unittest.mock import Mock

import pytest

from hvprovision.infrastructure.resilience import (
    ExponentialBackoffStrategy,
    MaxRetriesExceededError,
    RetryConfig,
)


class TestRetryConfig:
    def test_defaults(self):
        config = RetryConfig()

        assert config.max_attempts == 3
        assert config.base_delay == 1.0
        assert config.max_delay == 30.0

    def test_max_delay_below_base_delay_is_rejected(self):
        with pytest.raises(ValueError):
            RetryConfig(base_delay=10.0, max_delay=1.0)


class TestExponentialBackoffStrategy:
    def test_delays_grow_and_are_capped(self):
        strategy = ExponentialBackoffStrategy(RetryConfig(base_delay=1.0, max_delay=5.0, backoff_multiplier=2.0))

        assert [strategy.delay_for(n) for n in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]

    def test_retries_transient_errors_until_success(self):
        # Arrange
        sleeps = []
        operation = Mock(side_effect=[ConnectionError("reset"), ConnectionError("reset"), "ok"])
        strategy = ExponentialBackoffStrategy(RetryConfig(max_attempts=3), sleep=sleeps.append)

        # Act
        result = strategy.execute(operation, "arg", retryable=(ConnectionError,))

        # Assert
        assert result == "ok"
        assert operation.call_count == 3
        operation.assert_called_with("arg")
        assert sleeps == [1.0, 2.0]

    def test_gives_up_after_max_attempts(self):
        # Arrange
        sleeps = []
        error = ConnectionError("refused")
        strategy = ExponentialBackoffStrategy(RetryConfig(max_attempts=2), sleep=sleeps.append)

        # Act
        with pytest.raises(MaxRetriesExceededError) as exc_info:
            strategy.execute(Mock(side_effect=error), retryable=(ConnectionError,), operation_name="list_scopes")

        # Assert
        assert exc_info.value.attempts == 2
        assert exc_info.value.last_exception is error
        assert exc_info.value.operation == "list_scopes"
        assert sleeps == [1.0]

    def test_other_errors_are_not_retried(self):
        operation = Mock(side_effect=KeyError("x"))
        strategy = ExponentialBackoffStrategy(RetryConfig(max_attempts=5), sleep=Mock())

        with pytest.raises(KeyError):
            strategy.execute(operation, retryable=(ConnectionError,))

        assert operation.call_count == 1
