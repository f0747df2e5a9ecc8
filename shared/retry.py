"""
Retry mechanism for resilient operations.
"""

import asyncio
import functools
from typing import Any, Optional, Callable, Awaitable

from shared.logging import get_logger


class RetryConfig:
    """Fixed-delay retry policy: up to ``max_attempts`` calls, ``delay`` seconds apart."""

    def __init__(self, max_attempts: int = 4, delay: float = 2.0):
        self.max_attempts = max_attempts
        self.delay = delay

    @classmethod
    def fixed(cls, retries: int, delay: float) -> "RetryConfig":
        """``retries`` extra attempts after the first, ``delay`` seconds apart."""
        return cls(max_attempts=retries + 1, delay=delay)


class RetryError(Exception):
    """Exception raised when all retry attempts are exhausted."""
    def __init__(self, message: str, last_exception: Exception, attempts: int):
        super().__init__(message)
        self.last_exception = last_exception
        self.attempts = attempts


def retry_on_exception(exceptions: tuple = (Exception,),
                       config: Optional[RetryConfig] = None,
                       retry_on_result: Optional[Callable[[Any], bool]] = None) -> Callable:
    """Decorator for retrying async functions on exceptions.

    When ``retry_on_result`` is given, a result for which it returns True is
    retried as well. If the last attempt still produces such a result, that
    result is returned to the caller rather than raised.
    """

    if config is None:
        config = RetryConfig()

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            logger = get_logger(f"retry.{func.__name__}")

            for attempt in range(1, config.max_attempts + 1):
                try:
                    logger.debug(
                        "Retry attempt",
                        attempt=attempt,
                        max_attempts=config.max_attempts,
                        function=func.__name__
                    )

                    result = await func(*args, **kwargs)

                except exceptions as e:
                    if attempt == config.max_attempts:
                        logger.error(
                            "All retry attempts exhausted",
                            attempt=attempt,
                            max_attempts=config.max_attempts,
                            function=func.__name__,
                            error=str(e)
                        )
                        raise RetryError(
                            f"Function {func.__name__} failed after {config.max_attempts} attempts",
                            last_exception=e,
                            attempts=config.max_attempts
                        ) from e

                    delay = config.delay

                    logger.warning(
                        "Retry attempt failed, waiting before next attempt",
                        attempt=attempt,
                        delay=delay,
                        function=func.__name__,
                        error=str(e)
                    )

                    await asyncio.sleep(delay)
                    continue

                if retry_on_result is not None and retry_on_result(result):
                    if attempt == config.max_attempts:
                        logger.error(
                            "All retry attempts exhausted, returning last result",
                            attempt=attempt,
                            max_attempts=config.max_attempts,
                            function=func.__name__
                        )
                        return result

                    delay = config.delay

                    logger.warning(
                        "Retryable result, waiting before next attempt",
                        attempt=attempt,
                        delay=delay,
                        function=func.__name__
                    )

                    await asyncio.sleep(delay)
                    continue

                if attempt > 1:
                    logger.info(
                        "Retry succeeded",
                        attempt=attempt,
                        function=func.__name__
                    )

                return result

            raise ValueError(f"max_attempts must be at least 1, got {config.max_attempts}")

        return wrapper

    return decorator
