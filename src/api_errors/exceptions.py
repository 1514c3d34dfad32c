"""Custom Exception Hierarchy.

Defines typed exceptions that map to specific HTTP status codes
and error codes for consistent API error responses.
"""

from typing import Any, Dict, List, Optional

from src.api_errors.config import ErrorCode, ERROR_STATUS_MAP


class SocialAPIError(Exception):
    """Base exception for all social analytics API errors.

    All custom API exceptions inherit from this, allowing a single
    exception handler to catch the entire hierarchy.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = ERROR_STATUS_MAP.get(error_code, 500)
        self.details = details or []
        self.headers = headers or {}


class ValidationError(SocialAPIError):
    """Raised when request input fails validation."""

    def __init__(
        self,
        message: str = "Validation failed",
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
        field: Optional[str] = None,
    ):
        if field and not details:
            details = [{"field": field, "issue": message}]
        super().__init__(message, error_code, details)
        self.field = field


class NotFoundError(SocialAPIError):
    """Raised when a resolvable platform/handle has no matching record."""

    def __init__(
        self,
        message: str = "Resource not found",
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
        platform: Optional[str] = None,
        handle: Optional[str] = None,
    ):
        details = []
        if platform or handle:
            details = [{"platform": platform, "handle": handle}]
        super().__init__(message, error_code, details)
        self.platform = platform
        self.handle = handle


class PlatformNotConfiguredError(SocialAPIError):
    """Raised when no live source is configured for a platform."""

    def __init__(self, message: str, platform: Optional[str] = None):
        details = [{"platform": platform}] if platform else []
        super().__init__(message, ErrorCode.PLATFORM_NOT_CONFIGURED, details)
        self.platform = platform


class UpstreamError(SocialAPIError):
    """Raised when a live platform API fails."""

    def __init__(
        self,
        message: str = "Upstream request failed",
        upstream_status: Optional[int] = None,
    ):
        super().__init__(message, ErrorCode.UPSTREAM_ERROR)
        self.upstream_status = upstream_status


class RateLimitError(SocialAPIError):
    """Raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[int] = None,
    ):
        headers = {}
        if retry_after is not None:
            headers["Retry-After"] = str(retry_after)
        super().__init__(
            message,
            ErrorCode.RATE_LIMIT_EXCEEDED,
            headers=headers,
        )
        self.retry_after = retry_after


class ServiceUnavailableError(SocialAPIError):
    """Raised when a dependent service is unavailable."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        error_code: ErrorCode = ErrorCode.SERVICE_UNAVAILABLE,
    ):
        super().__init__(message, error_code)
