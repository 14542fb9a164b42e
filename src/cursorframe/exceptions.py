"""
Adapter-specific exception classes.
"""
import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Base class for all cursorframe errors.
    """


class CursorAccessError(DatabaseError):
    """Error reading metadata from, advancing, reading or releasing a cursor.

    This is the single fault type raised across the adapter boundary. The
    driver error that caused it is preserved as ``__cause__``.
    """


class TypeConversionError(DatabaseError):
    """Error converting a driver value into its canonical representation.
    """


class ValidationError(DatabaseError):
    """Error in argument or option validation.
    """


def wrap_cursor_errors(action: str) -> Callable:
    """Decorator re-raising failures of a cursor operation as CursorAccessError.

    CursorAccessError and ValidationError pass through untouched so a fault
    is never wrapped twice.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            try:
                return func(*args, **kwargs)
            except (CursorAccessError, ValidationError):
                raise
            except Exception as e:
                logger.error(f'Cursor failure while {action}: {e}')
                raise CursorAccessError(f'Error while {action}: {e}') from e
        return wrapper
    return decorator
