import asyncio
import functools
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type, TypeVar, Union

from loguru import logger

from ..exceptions import (
    SportsReelsException,
    ProviderException,
    ConfigurationException,
    ValidationException,
)

T = TypeVar('T')

__all__ = [
    "handle_exceptions",
    "convert_exceptions",
    "retry_delay",
    "SportsReelsException",
    "ProviderException",
    "ConfigurationException",
    "ValidationException",
]

# Retrying these cannot change the outcome
NON_RETRYABLE: Tuple[Type[Exception], ...] = (ConfigurationException, ValidationException)


def retry_delay(attempt: int, backoff_factor: float = 2.0, max_delay: float = 60.0) -> float:
    """Exponential backoff for the given zero-based attempt, capped at ``max_delay``."""
    return min(backoff_factor ** attempt, max_delay)


def handle_exceptions(
    retries: int = 3,
    fallback: Any = None,
    exceptions: Union[Type[Exception], tuple] = Exception,
    backoff_factor: float = 2.0,
    max_delay: float = 60.0,
    non_retryable: Tuple[Type[Exception], ...] = NON_RETRYABLE,
):
    """
    Retry an async provider call with exponential backoff.

    ``asyncio.CancelledError`` is a BaseException and is never retried, so an
    upload cancelled mid-call stops immediately.

    Args:
        retries: Total number of attempts
        fallback: Value returned instead of raising once all attempts fail
        exceptions: Exception types that trigger a retry
        backoff_factor: Base of the exponential delay between attempts
        max_delay: Upper bound on a single delay, in seconds
        non_retryable: Exception types re-raised on the first occurrence
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            last_exception: Optional[Exception] = None

            for attempt in range(retries):
                try:
                    return await func(*args, **kwargs)
                except non_retryable:
                    raise
                except exceptions as e:
                    last_exception = e
                    if attempt < retries - 1:
                        delay = retry_delay(attempt, backoff_factor, max_delay)
                        logger.warning(f"Attempt {attempt + 1} of {func.__name__} failed: {e}. Retrying in {delay}s...")
                        await asyncio.sleep(delay)
                    else:
                        logger.error(f"All {retries} attempts of {func.__name__} failed: {e}")

            if fallback is not None:
                logger.info(f"Returning fallback value for {func.__name__}: {fallback}")
                return fallback

            raise last_exception

        return wrapper

    return decorator


def convert_exceptions(exception_map: Dict[Type[Exception], Type[SportsReelsException]]):
    """
    Rewrap third-party errors raised by an async provider call.

    Exceptions that already belong to the SportsReels hierarchy pass through
    untouched. The first matching entry of ``exception_map`` wins and keeps the
    original as ``__cause__``.
    """
    def _convert(e: Exception) -> Optional[SportsReelsException]:
        if isinstance(e, SportsReelsException):
            return None
        for source_exc, target_exc in exception_map.items():
            if isinstance(e, source_exc):
                return target_exc(str(e), details={"original_exception": type(e).__name__})
        return None

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                converted = _convert(e)
                if converted is not None:
                    raise converted from e
                raise

        return wrapper

    return decorator
