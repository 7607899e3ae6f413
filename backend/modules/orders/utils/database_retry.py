# backend/modules/orders/utils/database_retry.py

import asyncio
import logging
from typing import TypeVar, Callable, Awaitable, Set
import random

from sqlalchemy.exc import OperationalError, DBAPIError
from sqlalchemy.orm.exc import StaleDataError

from core.exceptions import ConflictError, StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Database error codes that indicate retry-able conditions
RETRY_ERROR_CODES: Set[str] = {
    # PostgreSQL
    "40001",  # serialization_failure
    "40P01",  # deadlock_detected
    "55P03",  # lock_not_available
    # MySQL
    "1205",  # Lock wait timeout exceeded
    "1213",  # Deadlock found when trying to get lock
    # SQLite
    "database is locked",
    "database table is locked",
}


def is_retryable_error(error: Exception) -> bool:
    """
    Check if a database error is a transient concurrency failure

    Args:
        error: The exception to check

    Returns:
        True if re-running the same transaction may succeed
    """
    if isinstance(error, StaleDataError):
        return True

    if isinstance(error, (OperationalError, DBAPIError)):
        error_str = str(error).lower()
        if any(code in error_str for code in ["deadlock", "serialization", "lock"]):
            return True

        orig = getattr(error, "orig", None)
        if orig is not None and getattr(orig, "pgcode", None):
            return orig.pgcode in RETRY_ERROR_CODES
        if orig is not None and getattr(orig, "args", None):
            error_code = str(orig.args[0])
            return any(code in error_code for code in RETRY_ERROR_CODES)

    return False


def translate_store_error(error: Exception) -> Exception:
    """
    Map a SQLAlchemy failure onto the store's error kinds.

    Lost races become ConflictError (retried by retry_on_conflict),
    everything else from the driver becomes StoreUnavailableError.
    """
    if is_retryable_error(error):
        return ConflictError(
            detail=f"Order was modified concurrently: {error}",
            error_code="ORDER_CONFLICT",
        )
    if isinstance(error, (OperationalError, DBAPIError)):
        return StoreUnavailableError()
    return error


def translate_read_error(error: Exception) -> Exception:
    """
    Map a failed read onto StoreUnavailableError.

    Reads are never replayed, so a lock timeout while reading is reported
    as a transient outage rather than as a conflict.
    """
    if isinstance(error, (StaleDataError, OperationalError, DBAPIError)):
        return StoreUnavailableError()
    return error


async def retry_on_conflict(
    func: Callable[..., Awaitable[T]],
    *args,
    max_retries: int = 3,
    initial_delay: float = 0.05,
    max_delay: float = 1.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    **kwargs,
) -> T:
    """
    Re-run a transaction that lost a race, with exponential backoff

    func must re-read its inputs on every call; the intent (usually a
    mutator) is what gets replayed, never a stale object.

    Args:
        func: The async function to retry
        max_retries: Maximum number of retry attempts
        initial_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries in seconds
        backoff_factor: Multiplier for exponential backoff
        jitter: Add random jitter to prevent thundering herd

    Raises:
        ConflictError: if every attempt lost its race
    """
    delay = initial_delay

    for attempt in range(max_retries + 1):
        try:
            return await func(*args, **kwargs)
        except ConflictError as e:
            if attempt == max_retries:
                logger.error(
                    f"Giving up after {max_retries + 1} conflicting attempts: {e.detail}"
                )
                raise

            actual_delay = min(delay, max_delay)
            if jitter:
                # Add random jitter (0-25% of delay)
                actual_delay *= 1 + random.random() * 0.25

            logger.warning(
                f"Order conflict on attempt {attempt + 1}/{max_retries + 1}. "
                f"Retrying in {actual_delay:.3f}s"
            )

            await asyncio.sleep(actual_delay)
            delay *= backoff_factor
