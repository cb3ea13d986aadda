"""
Transaction Utilities
=====================

Retry support for outermost units of work that lose a row-lock race.

Usage Examples:
    @retry_on_lock_contention()
    @transaction.atomic
    def cancel_order(order_id):
        ...
"""

import logging
import time
from functools import wraps

from django.conf import settings
from django.db import OperationalError, transaction

logger = logging.getLogger(__name__)

# Substrings of backend errors that mean "another transaction holds the lock"
LOCK_CONTENTION_MARKERS = (
    "database is locked",
    "database table is locked",
    "deadlock",
    "could not serialize access",
    "lock wait timeout",
)


class TransactionError(Exception):
    """Custom exception for transaction-related errors"""

    pass


class LockContentionError(TransactionError):
    """Raised when a unit of work still loses the lock race after every retry"""

    pass


def is_lock_contention(error: Exception) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in LOCK_CONTENTION_MARKERS)


def retry_on_lock_contention(max_retries=None, delay=0.05, backoff=2.0, using="default"):
    """
    Decorator to retry a unit of work on lock contention with exponential backoff.

    Retries only happen when the call is the outermost transaction: inside an
    enclosing atomic block the error is re-raised so the enclosing unit of work
    rolls back as a whole.

    Args:
        max_retries (int): Maximum number of retry attempts (default MARKETPLACE["LOCK_RETRY_ATTEMPTS"])
        delay (float): Initial delay between retries in seconds
        backoff (float): Backoff multiplier for delay
        using (str): Database alias
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if transaction.get_connection(using).in_atomic_block:
                return func(*args, **kwargs)

            retries = max_retries if max_retries is not None else settings.MARKETPLACE.get("LOCK_RETRY_ATTEMPTS", 3)
            current_delay = delay

            for attempt in range(retries + 1):
                try:
                    return func(*args, **kwargs)
                except OperationalError as e:
                    if not is_lock_contention(e):
                        raise
                    if attempt >= retries:
                        raise LockContentionError(f"{func.__name__} lost the lock race {attempt + 1} times: {e}") from e
                    logger.warning(
                        f"Lock contention in {func.__name__}, retrying in {current_delay}s "
                        f"(attempt {attempt + 1}/{retries})"
                    )
                    time.sleep(current_delay)
                    current_delay *= backoff

        return wrapper

    return decorator
