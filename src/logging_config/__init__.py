"""Structured Logging & Request Tracing.

Structured JSON or console logging, request ID propagation,
and performance timing for the social analytics service.
"""

from src.logging_config.config import LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import RequestContext, bind_context, generate_request_id, get_request_id
from src.logging_config.middleware import REQUEST_ID_HEADER, RequestTracingMiddleware
from src.logging_config.performance import PerformanceTimer, log_performance
from src.logging_config.setup import configure_logging, get_logger

__all__ = [
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "PerformanceTimer",
    "REQUEST_ID_HEADER",
    "RequestContext",
    "RequestTracingMiddleware",
    "bind_context",
    "configure_logging",
    "generate_request_id",
    "get_logger",
    "get_request_id",
    "log_performance",
]
