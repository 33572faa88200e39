"""
Shared helpers for ledger repositories: retry and operation logging decorators.
"""

import asyncio
import functools
import logging
from typing import Callable, Optional

from order_import.utils.error_handler import LedgerException

logger = logging.getLogger(__name__)


def with_retry(
    max_attempts: int = 3,
    delay: float = 0.5,
    backoff: float = 2.0,
    exceptions: tuple = (LedgerException,),
) -> Callable:
    """
    Decorator for retrying ledger operations with exponential backoff.

    Only use it on idempotent calls: reads, and the synced append, which the
    partial unique index turns into a DuplicateError when repeated.

    Args:
        max_attempts: Maximum number of attempts
        delay: Initial delay between attempts in seconds
        backoff: Multiplier for exponential backoff
        exceptions: Exceptions that trigger a retry
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            current_delay = delay
            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        logger.error(f"All {max_attempts} attempts failed for {func.__name__}")
                        raise
                    logger.warning(
                        f"Attempt {attempt}/{max_attempts} failed for {func.__name__}: {e}. "
                        f"Retrying in {current_delay:.1f}s..."
                    )
                    await asyncio.sleep(current_delay)
                    current_delay *= backoff

        return wrapper

    return decorator


def log_operation(operation_name: Optional[str] = None) -> Callable:
    """
    Decorator for logging repository operations.

    Args:
        operation_name: Optional custom name for the operation
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            op_name = operation_name or f"{self.__class__.__name__}.{func.__name__}"
            logger.debug(f"Starting operation: {op_name}")
            try:
                result = await func(self, *args, **kwargs)
            except Exception as e:
                logger.error(f"Operation failed: {op_name} - {e}")
                raise
            logger.debug(f"Operation successful: {op_name}")
            return result

        return wrapper

    return decorator
