"""Performance Logging.

Timing helpers for catalog rebuilds and federated fan-outs: calls are
logged at DEBUG and slow ones (above the threshold) at WARNING.
"""

import inspect
import functools
import logging
import time
from typing import Any, Callable, Optional

from src.logging_config.config import DEFAULT_LOGGING_CONFIG

logger = logging.getLogger(__name__)


class PerformanceTimer:
    """Context manager for timing code blocks.

    Example:
        with PerformanceTimer("catalog_reload") as timer:
            catalog.reload(records)
        print(f"Reload took {timer.duration_ms:.1f}ms")
    """

    def __init__(
        self,
        operation_name: str,
        threshold_ms: Optional[float] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.operation_name = operation_name
        self.threshold_ms = threshold_ms if threshold_ms is not None else DEFAULT_LOGGING_CONFIG.slow_threshold_ms
        self.log = log or logger
        self.start_time: float = 0
        self.duration_ms: float = 0

    def __enter__(self) -> "PerformanceTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000
        extra = {"duration_ms": round(self.duration_ms, 2)}

        if exc_type is not None:
            self.log.error(
                f"{self.operation_name} failed after {self.duration_ms:.1f}ms: {exc_type.__name__}",
                extra=extra,
            )
        elif self.duration_ms >= self.threshold_ms:
            self.log.warning(
                f"Slow operation: {self.operation_name} took {self.duration_ms:.1f}ms",
                extra=extra,
            )
        else:
            self.log.debug(
                f"{self.operation_name} completed in {self.duration_ms:.1f}ms",
                extra=extra,
            )


def log_performance(
    threshold_ms: Optional[float] = None,
    logger_name: Optional[str] = None,
) -> Callable:
    """Decorator that logs function execution time.

    Works on both plain and async functions.

    Example:
        @log_performance(threshold_ms=2000)
        async def federated_search(self, query, platforms=None, limit=None):
            ...
    """

    def decorator(func: Callable) -> Callable:
        _logger = logging.getLogger(logger_name or func.__module__)
        name = func.__qualname__

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with PerformanceTimer(name, threshold_ms, _logger):
                    return await func(*args, **kwargs)
            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with PerformanceTimer(name, threshold_ms, _logger):
                return func(*args, **kwargs)
        return sync_wrapper

    return decorator
