"""Bounded exponential-backoff retry for single backend calls."""

import time
from typing import Callable, TypeVar

from loguru import logger

from diffdraft.llm.exceptions import BackendConnectionError, BackendError, RetryExhaustedError

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({429, 503})
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 1.0


def is_retryable_error(error: Exception) -> bool:
    """Check if an error is transient and worth retrying.

    Rate limiting (429), service unavailable (503) and network-level
    timeouts or connection failures are transient. Every other status,
    malformed payloads and authentication problems are not.
    """
    if isinstance(error, BackendConnectionError):
        return True
    if isinstance(error, BackendError):
        return error.status_code in RETRYABLE_STATUS_CODES
    return False


class RetryPolicy:
    """Retry a callable on transient failures with exponential backoff.

    The delay before attempt ``n`` (n >= 2) is ``base_delay * 2 ** (n - 2)``,
    i.e. 1s, 2s, 4s with the defaults.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep

    def backoff(self, attempt: int) -> float:
        """Delay in seconds before the given (1-based) attempt."""
        if attempt <= 1:
            return 0.0
        return self.base_delay * (2 ** (attempt - 2))

    def call(self, func: Callable[[], T], description: str = "backend call") -> T:
        """Run ``func``, retrying transient failures.

        Args:
            func: Zero-argument callable performing one network attempt.
            description: Label used in logs and in the exhaustion error.

        Returns:
            Whatever ``func`` returns on its first successful attempt.

        Raises:
            RetryExhaustedError: If every attempt failed with a transient error.
            Exception: Any non-retryable error, immediately and unwrapped.
        """
        last_error: Exception | None = None

        for attempt in range(1, self.max_attempts + 1):
            if attempt > 1:
                delay = self.backoff(attempt)
                logger.warning(
                    f"{description} failed: {last_error}. "
                    f"Retrying in {delay:g}s (attempt {attempt}/{self.max_attempts})"
                )
                self._sleep(delay)

            try:
                return func()
            except Exception as e:
                if not is_retryable_error(e):
                    raise
                last_error = e

        raise RetryExhaustedError(
            f"{description} failed after {self.max_attempts} attempts: {last_error}",
            attempts=self.max_attempts,
            last_error=last_error,
        ) from last_error
