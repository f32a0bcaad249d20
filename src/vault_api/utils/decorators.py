"""Decorator utilities for cross-cutting concerns."""
import time
import logging
import functools
from typing import Any, Callable, Optional, TypeVar, cast

# Setup logging
logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


def log_execution_time(func: Optional[F] = None, *, logger_name: Optional[str] = None):
    """Decorator to log function execution time.

    Usable bare (``@log_execution_time``) or with a logger name
    (``@log_execution_time(logger_name=__name__)``).

    Args:
        func: The function to decorate
        logger_name: Optional logger name (defaults to module logger)

    Returns:
        Decorated function that logs execution time
    """
    timing_logger = logging.getLogger(logger_name) if logger_name else logger

    def decorator(inner: F) -> F:
        @functools.wraps(inner)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = inner(*args, **kwargs)
                duration = time.perf_counter() - start_time
                timing_logger.info(f"{inner.__name__} completed in {duration:.3f}s")
                return result
            except Exception as e:
                duration = time.perf_counter() - start_time
                timing_logger.error(f"{inner.__name__} failed after {duration:.3f}s: {str(e)}")
                raise
        return cast(F, wrapper)

    if func is not None:
        return decorator(func)
    return decorator
