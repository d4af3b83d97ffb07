"""Retry decorator for async provider calls"""
import asyncio
import logging
from functools import wraps
from typing import Callable, Optional, Tuple, Type


def async_retry(
    max_attempts: int = 3,
    backoff_factor: float = 2.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    logger: Optional[logging.Logger] = None
):
    """
    Retry an async callable when it raises one of ``exceptions``.

    The wait before attempt ``n`` (zero based) is ``backoff_factor ** n``
    seconds. After the last attempt the original exception is re-raised.

    Args:
        max_attempts: Total number of attempts, including the first one
        backoff_factor: Base of the exponential wait between attempts
        exceptions: Exception types that trigger a retry
        logger: Logger used for retry warnings

    Example:
        @async_retry(max_attempts=3, exceptions=(httpx.TransportError,))
        async def call_api():
            ...
    """
    log = logger or logging.getLogger(__name__)
    attempts = max(1, max_attempts)

    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            for attempt in range(attempts):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == attempts - 1:
                        log.error(f"{func.__name__} failed after {attempts} attempts: {e}")
                        raise

                    wait_time = backoff_factor ** attempt
                    log.warning(
                        f"{func.__name__} attempt {attempt + 1}/{attempts} failed: {e}. "
                        f"Retrying in {wait_time:.1f}s"
                    )
                    await asyncio.sleep(wait_time)

        return wrapper
    return decorator
