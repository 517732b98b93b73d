"""
Store Reconnection Policy

Retry behaviour for the Redis connection, kept out of the connection
configuration itself so the adapter can consume it and tests can inspect it.

Two consumers:
- ConnectionManager.connect() wraps the initial PING in tenacity
- the connection pool gets a redis-py Retry so dropped sockets are
  re-established transparently on the next command
"""

from dataclasses import dataclass

from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError, TimeoutError
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential_jitter,
)

from geocache.core.logging.logger import get_logger

logger = get_logger(__name__)

RETRYABLE_ERRORS: tuple[type[Exception], ...] = (ConnectionError, TimeoutError)


@dataclass(frozen=True)
class ReconnectPolicy:
    """
    Reconnection policy for the key-value store.

    Attributes:
        max_attempts: Connection attempts before giving up
        max_total_backoff: Upper bound on wall time spent retrying (seconds)
        base_delay: First backoff delay (seconds)
        max_delay: Cap on any single backoff delay (seconds)
        retryable: Exception types worth retrying; anything else fails fast
    """

    max_attempts: int = 10
    max_total_backoff: float = 30.0
    base_delay: float = 0.1
    max_delay: float = 3.0
    retryable: tuple[type[Exception], ...] = RETRYABLE_ERRORS

    @classmethod
    def from_settings(cls, settings) -> "ReconnectPolicy":
        """Build the policy from the ``reconnect`` settings group."""
        reconnect = settings.reconnect
        return cls(
            max_attempts=reconnect.REDIS_RECONNECT_MAX_ATTEMPTS,
            max_total_backoff=reconnect.REDIS_RECONNECT_MAX_TOTAL_BACKOFF,
            base_delay=reconnect.REDIS_RECONNECT_BASE_DELAY,
            max_delay=reconnect.REDIS_RECONNECT_MAX_DELAY,
        )

    def is_retryable(self, exc: BaseException) -> bool:
        """Classify an error as transient (retry) or permanent (fail fast)."""
        return isinstance(exc, self.retryable)

    def retrying(self) -> AsyncRetrying:
        """
        Tenacity controller for connection attempts.

        Stops at whichever comes first: max_attempts or max_total_backoff.
        The last exception is re-raised unchanged.
        """
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts) | stop_after_delay(self.max_total_backoff),
            wait=wait_exponential_jitter(initial=self.base_delay, max=self.max_delay),
            retry=retry_if_exception(self.is_retryable),
            reraise=True,
            before_sleep=lambda retry_state: logger.warning(
                "Redis reconnect retry",
                stage="REDIS.RECONNECT",
                attempt=retry_state.attempt_number,
                delay=round(retry_state.idle_for, 3),
                error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
            ),
        )

    def command_retry(self) -> Retry:
        """redis-py Retry applied by the connection pool to individual commands."""
        return Retry(
            ExponentialBackoff(cap=self.max_delay, base=self.base_delay),
            max(self.max_attempts - 1, 0),
            supported_errors=self.retryable,
        )
