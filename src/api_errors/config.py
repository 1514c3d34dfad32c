"""API Error Configuration.

Defines error codes, severity levels, and configuration for
structured error handling across the social analytics API.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict


class ErrorCode(Enum):
    """Standardized error codes for API responses."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_PLATFORM = "INVALID_PLATFORM"
    INVALID_HANDLE = "INVALID_HANDLE"
    INVALID_LIMIT = "INVALID_LIMIT"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

    # Not found errors (404)
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    METRICS_NOT_FOUND = "METRICS_NOT_FOUND"

    # Rate limit errors (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATASET_ERROR = "DATASET_ERROR"

    # Not configured (501)
    PLATFORM_NOT_CONFIGURED = "PLATFORM_NOT_CONFIGURED"

    # Upstream errors (502)
    UPSTREAM_ERROR = "UPSTREAM_ERROR"

    # Service unavailable (503)
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


class ErrorSeverity(Enum):
    """Severity levels for error logging."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Map error codes to HTTP status codes
ERROR_STATUS_MAP: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_PLATFORM: 400,
    ErrorCode.INVALID_HANDLE: 400,
    ErrorCode.INVALID_LIMIT: 400,
    ErrorCode.MISSING_REQUIRED_FIELD: 400,
    ErrorCode.RESOURCE_NOT_FOUND: 404,
    ErrorCode.PROFILE_NOT_FOUND: 404,
    ErrorCode.METRICS_NOT_FOUND: 404,
    ErrorCode.RATE_LIMIT_EXCEEDED: 429,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.DATASET_ERROR: 500,
    ErrorCode.PLATFORM_NOT_CONFIGURED: 501,
    ErrorCode.UPSTREAM_ERROR: 502,
    ErrorCode.SERVICE_UNAVAILABLE: 503,
}

# Map error codes to severity
ERROR_SEVERITY_MAP: Dict[ErrorCode, ErrorSeverity] = {
    ErrorCode.VALIDATION_ERROR: ErrorSeverity.LOW,
    ErrorCode.INVALID_PLATFORM: ErrorSeverity.LOW,
    ErrorCode.INVALID_HANDLE: ErrorSeverity.LOW,
    ErrorCode.INVALID_LIMIT: ErrorSeverity.LOW,
    ErrorCode.MISSING_REQUIRED_FIELD: ErrorSeverity.LOW,
    ErrorCode.RESOURCE_NOT_FOUND: ErrorSeverity.LOW,
    ErrorCode.PROFILE_NOT_FOUND: ErrorSeverity.LOW,
    ErrorCode.METRICS_NOT_FOUND: ErrorSeverity.LOW,
    ErrorCode.RATE_LIMIT_EXCEEDED: ErrorSeverity.MEDIUM,
    ErrorCode.INTERNAL_ERROR: ErrorSeverity.CRITICAL,
    ErrorCode.DATASET_ERROR: ErrorSeverity.CRITICAL,
    ErrorCode.PLATFORM_NOT_CONFIGURED: ErrorSeverity.MEDIUM,
    ErrorCode.UPSTREAM_ERROR: ErrorSeverity.HIGH,
    ErrorCode.SERVICE_UNAVAILABLE: ErrorSeverity.HIGH,
}


@dataclass
class ErrorConfig:
    """Configuration for API error handling."""

    include_request_id: bool = True
    log_all_errors: bool = True
    max_error_detail_length: int = 1000
    suppress_internal_details: bool = True
    custom_error_messages: Dict[str, str] = field(default_factory=dict)


DEFAULT_ERROR_CONFIG = ErrorConfig()
