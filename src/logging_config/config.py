"""Logging Configuration.

Settings for structured logging, log levels, and output formats.
"""

from dataclasses import dataclass, field
from enum import Enum


class LogLevel(str, Enum):
    """Log level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output format."""
    JSON = "json"
    CONSOLE = "console"


@dataclass
class LoggingConfig:
    """Structured logging configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.CONSOLE
    include_caller: bool = True
    slow_threshold_ms: float = 2000.0
    exclude_paths: list[str] = field(
        default_factory=lambda: ["/health", "/favicon.ico"]
    )
    service_name: str = "socialscope"
    quiet_loggers: list[str] = field(
        default_factory=lambda: ["httpx", "httpcore", "asyncio", "uvicorn.access"]
    )


DEFAULT_LOGGING_CONFIG = LoggingConfig()
