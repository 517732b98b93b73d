"""
Unit Tests for ReconnectPolicy

Tests error classification and the tenacity controller used for the
initial Redis connection.
"""

import pytest
from redis.asyncio.retry import Retry
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from geocache.infrastructure.store import ReconnectPolicy


def fast_policy(max_attempts: int = 3) -> ReconnectPolicy:
    """Policy with zero backoff so retries do not sleep."""
    return ReconnectPolicy(max_attempts=max_attempts, max_total_backoff=5.0, base_delay=0.0, max_delay=0.0)


@pytest.mark.unit
class TestReconnectPolicyConfiguration:
    def test_defaults(self):
        policy = ReconnectPolicy()

        assert policy.max_attempts == 10
        assert policy.max_total_backoff == 30.0
        assert policy.base_delay == 0.1
        assert policy.max_delay == 3.0

    def test_from_settings(self, app_settings):
        settings = app_settings.model_copy(
            update={"REDIS_RECONNECT_MAX_ATTEMPTS": 4, "REDIS_RECONNECT_MAX_DELAY": 1.5}
        )

        policy = ReconnectPolicy.from_settings(settings)

        assert policy.max_attempts == 4
        assert policy.max_delay == 1.5

    def test_command_retry_is_redis_retry(self):
        assert isinstance(ReconnectPolicy().command_retry(), Retry)


@pytest.mark.unit
class TestErrorClassification:
    @pytest.mark.parametrize("exc", [RedisConnectionError("refused"), RedisTimeoutError("timed out")])
    def test_transient_errors_are_retryable(self, exc):
        assert ReconnectPolicy().is_retryable(exc)

    @pytest.mark.parametrize("exc", [ResponseError("WRONGTYPE"), ValueError("bad")])
    def test_other_errors_fail_fast(self, exc):
        assert not ReconnectPolicy().is_retryable(exc)


@pytest.mark.unit
class TestRetrying:
    """Behaviour of the AsyncRetrying controller."""

    async def test_recovers_after_transient_failures(self):
        attempts = 0

        async for attempt in fast_policy().retrying():
            with attempt:
                attempts += 1
                if attempts < 3:
                    raise RedisConnectionError("refused")

        assert attempts == 3

    async def test_gives_up_after_max_attempts(self):
        attempts = 0

        with pytest.raises(RedisConnectionError):
            async for attempt in fast_policy(max_attempts=2).retrying():
                with attempt:
                    attempts += 1
                    raise RedisConnectionError("refused")

        assert attempts == 2

    async def test_non_retryable_error_is_not_retried(self):
        attempts = 0

        with pytest.raises(ResponseError):
            async for attempt in fast_policy().retrying():
                with attempt:
                    attempts += 1
                    raise ResponseError("NOAUTH")

        assert attempts == 1

    async def test_retry_follows_policy_classification(self):
        policy = ReconnectPolicy(max_attempts=3, base_delay=0.0, max_delay=0.0, retryable=(RedisTimeoutError,))
        attempts = 0

        with pytest.raises(RedisConnectionError):
            async for attempt in policy.retrying():
                with attempt:
                    attempts += 1
                    raise RedisConnectionError("refused")

        assert attempts == 1
        assert not policy.is_retryable(RedisConnectionError("refused"))
