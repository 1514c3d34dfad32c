"""API Error Handling & Validation.

Provides structured error responses, global exception handlers,
and input validation utilities for the social analytics API.
"""

from src.api_errors.config import (
    ErrorCode,
    ErrorConfig,
    ErrorSeverity,
)
from src.api_errors.exceptions import (
    NotFoundError,
    PlatformNotConfiguredError,
    RateLimitError,
    ServiceUnavailableError,
    SocialAPIError,
    UpstreamError,
    ValidationError,
)
from src.api_errors.handlers import (
    ErrorResponse,
    create_error_response,
    register_exception_handlers,
)
from src.api_errors.validators import (
    coerce_limit,
    validate_handle,
    validate_platform,
)

__all__ = [
    # Config
    "ErrorCode",
    "ErrorConfig",
    "ErrorSeverity",
    # Exceptions
    "NotFoundError",
    "PlatformNotConfiguredError",
    "RateLimitError",
    "ServiceUnavailableError",
    "SocialAPIError",
    "UpstreamError",
    "ValidationError",
    # Handlers
    "ErrorResponse",
    "create_error_response",
    "register_exception_handlers",
    # Validators
    "coerce_limit",
    "validate_handle",
    "validate_platform",
]
