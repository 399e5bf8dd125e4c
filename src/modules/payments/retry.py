"""Bounded retry with exponential backoff for provider calls.

Only transport failures (connection errors and timeouts) are retried.
An HTTP error response is an answer from the provider, so it surfaces
immediately.
"""

from __future__ import annotations

import time
from typing import Callable, Tuple, Type, TypeVar

import requests
import structlog

from modules.payments.exceptions import PaymentProviderUnavailable

logger = structlog.get_logger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (
    requests.ConnectionError,
    requests.Timeout,
)


class RetryExecutor:
    """Run a call up to ``attempts`` times.

    The delay before retry *n* (1-based) is ``base_delay * 2 ** (n - 1)``.
    """

    def __init__(
        self,
        attempts: int = 3,
        base_delay: float = 0.3,
        sleep: Callable[[float], None] = time.sleep,
        retryable: Tuple[Type[BaseException], ...] = RETRYABLE_ERRORS,
    ) -> None:
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self._attempts = attempts
        self._base_delay = base_delay
        self._sleep = sleep
        self._retryable = retryable

    def delay_for(self, retry_number: int) -> float:
        return self._base_delay * 2 ** (retry_number - 1)

    def run(self, operation: Callable[[], T], name: str = "provider_call") -> T:
        """Execute *operation*, retrying transport failures.

        Raises:
            PaymentProviderUnavailable: every attempt failed with a
                retryable error.
        """
        log = logger.bind(operation=name)
        for attempt in range(1, self._attempts + 1):
            try:
                return operation()
            except self._retryable as exc:
                if attempt == self._attempts:
                    log.error(
                        "payment.retries_exhausted",
                        attempts=attempt,
                        error=str(exc),
                    )
                    raise PaymentProviderUnavailable(
                        f"{name} failed after {attempt} attempts."
                    ) from exc
                delay = self.delay_for(attempt)
                log.warning(
                    "payment.retry_scheduled",
                    attempt=attempt,
                    delay=delay,
                    error=str(exc),
                )
                self._sleep(delay)
        raise AssertionError("unreachable")
