"""
Bounded retry utilities.

The combinator is synchronous and takes its timing primitive as an argument,
so callers can pass a fake ``sleep`` in tests.
"""

import time
from typing import Any, Callable, Optional

from clbox.commands.constants import (
    HEALTH_CHECK_ATTEMPTS,
    HEALTH_CHECK_BACKOFF,
    HEALTH_CHECK_DELAY,
)
from clbox.commands.errors import RetryExhaustedError


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = HEALTH_CHECK_ATTEMPTS,
        delay: float = HEALTH_CHECK_DELAY,
        backoff: float = HEALTH_CHECK_BACKOFF,
        exceptions: tuple = (Exception,),
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.delay = delay
        self.backoff = backoff
        self.exceptions = exceptions

    def __repr__(self) -> str:
        return (
            f"RetryConfig(max_attempts={self.max_attempts}, delay={self.delay}, "
            f"backoff={self.backoff})"
        )


def retry_call(
    func: Callable,
    *args,
    config: Optional[RetryConfig] = None,
    sleep: Callable[[float], Any] = time.sleep,
    on_retry: Optional[Callable[[int, BaseException], Any]] = None,
    **kwargs,
) -> Any:
    """
    Call a function until it succeeds or the attempt budget is spent.

    Args:
        func: The function to call
        *args: Positional arguments for the function
        config: RetryConfig instance
        sleep: Called with the delay in seconds between attempts
        on_retry: Optional callback receiving (attempt_number, exception)
            after each failed attempt
        **kwargs: Keyword arguments for the function

    Returns:
        The result of the first successful call

    Raises:
        RetryExhaustedError: After ``config.max_attempts`` failures, chained
            from the last exception
    """
    retry_config = config or RetryConfig()
    last_exception = None
    current_delay = retry_config.delay

    for attempt in range(retry_config.max_attempts):
        try:
            return func(*args, **kwargs)
        except retry_config.exceptions as e:
            last_exception = e
            if on_retry is not None:
                on_retry(attempt + 1, e)

            # Don't wait after the last attempt
            if attempt == retry_config.max_attempts - 1:
                break

            sleep(current_delay)
            current_delay *= retry_config.backoff

    raise RetryExhaustedError(
        f"Call failed after {retry_config.max_attempts} attempts "
        f"with {retry_config.delay}s between attempts",
        attempts=retry_config.max_attempts,
        delay=retry_config.delay,
        last_exception=last_exception,
    ) from last_exception


HEALTH_RETRY_CONFIG = RetryConfig(
    max_attempts=HEALTH_CHECK_ATTEMPTS,
    delay=HEALTH_CHECK_DELAY,
    backoff=HEALTH_CHECK_BACKOFF,
)
