"""
Database retry decorators for handling SQLite concurrent write locking.
"""
import time
import logging
from functools import wraps
from sqlalchemy.exc import OperationalError

from .exceptions import TransactionException

logger = logging.getLogger(__name__)


def _is_lock_error(exc: BaseException) -> bool:
    # transaction() wraps the driver error, so look at the cause too
    for candidate in (exc, exc.__cause__):
        if isinstance(candidate, OperationalError) and "database is locked" in str(candidate).lower():
            return True
    return False


def retry_on_db_lock(max_retries=3, delay=0.5):
    """
    Decorator that retries database operations on 'database is locked' errors.

    The wrapped function must be a complete unit of work (it rolls back on
    failure), so running it again is safe.

    Args:
        max_retries: Maximum number of retry attempts (default: 3)
        delay: Delay in seconds between retries (default: 0.5)

    Usage:
        @retry_on_db_lock(max_retries=3, delay=0.5)
        def my_db_write_function(db, data):
            with transaction(db):
                db.add(data)
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except (OperationalError, TransactionException) as e:
                    if _is_lock_error(e) and attempt < max_retries:
                        logger.warning(
                            f"Database locked on {func.__name__}, "
                            f"retry {attempt + 1}/{max_retries} in {delay}s"
                        )
                        time.sleep(delay)
                        continue
                    if _is_lock_error(e):
                        logger.error(f"Max retries ({max_retries}) exceeded for {func.__name__}")
                    # Not a lock error or max retries reached
                    raise

        return wrapper
    return decorator
