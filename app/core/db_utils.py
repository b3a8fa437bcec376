"""
Database utilities for connection management and error handling
"""
import asyncio
import functools
import logging
from typing import Callable, Any, TypeVar, cast, Awaitable, Optional

from sqlalchemy.exc import DBAPIError, OperationalError

from app.core.config import settings

logger = logging.getLogger(__name__)

# Define a type variable for the return type of the decorated function
T = TypeVar('T')

TRANSIENT_ERROR_NAMES = (
    "ConnectionError",
    "OperationalError",
    "ConnectionDoesNotExistError",
    "ConnectionRefusedError",
    "SerializationError",
    "DeadlockDetectedError",
)


def is_transient_db_error(exc: BaseException) -> bool:
    """True for errors where rolling back and re-running the unit of work is safe."""
    if isinstance(exc, OperationalError):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    error_name = type(exc).__name__
    orig_name = type(getattr(exc, "orig", None)).__name__
    return any(err in error_name or err in orig_name for err in TRANSIENT_ERROR_NAMES)


def with_db_retry(
    max_retries: Optional[int] = None,
    retry_delay: Optional[float] = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator that retries database operations on transient errors.

    The decorated coroutine must leave the session rolled back when it raises,
    so that every attempt starts a fresh transaction.

    Args:
        max_retries: Maximum number of retries before giving up
        retry_delay: Delay between retries in seconds

    Returns:
        Decorated function with retry logic
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            limit = settings.DB_RETRY_ATTEMPTS if max_retries is None else max_retries
            delay_base = settings.DB_RETRY_DELAY if retry_delay is None else retry_delay
            retries = 0

            while True:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if not is_transient_db_error(e):
                        raise
                    retries += 1
                    if retries > limit:
                        logger.error(f"Database operation failed after {limit} retries: {e}")
                        raise
                    delay = delay_base * (2 ** (retries - 1))  # Exponential backoff
                    logger.warning(
                        f"Transient database error: {str(e)}. "
                        f"Retrying in {delay:.2f}s... (Attempt {retries}/{limit})"
                    )
                    await asyncio.sleep(delay)

        return cast(Callable[..., Awaitable[T]], wrapper)

    return decorator


def contains_pattern(needle: str) -> str:
    """LIKE pattern matching ``needle`` anywhere, with wildcards escaped (escape char ``\\``)."""
    escaped = needle.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
