"""Input Validation Utilities.

Reusable validators for request inputs: platform identifiers,
handles, and result limits.
"""

from typing import TYPE_CHECKING, Any, Optional
import math

from src.api_errors.config import ErrorCode
from src.api_errors.exceptions import ValidationError

if TYPE_CHECKING:
    from src.social_catalog.platforms import Platform


def validate_platform(platform: Any, field: str = "platform") -> "Platform":
    """Resolve a required platform parameter.

    Args:
        platform: Raw platform id, alias or label.
        field: Name of the offending field in the error details.

    Returns:
        The canonical Platform.

    Raises:
        ValidationError: If the value is missing or does not resolve.
    """
    from src.social_catalog.platforms import Platform, normalize_platform

    if platform is None or (isinstance(platform, str) and not platform.strip()):
        raise ValidationError(
            message=f"'{field}' is required",
            error_code=ErrorCode.MISSING_REQUIRED_FIELD,
            field=field,
        )

    resolved = normalize_platform(platform)
    if resolved is None:
        raise ValidationError(
            message=f"Unknown platform: '{platform}'. Expected one of {[p.value for p in Platform]}",
            error_code=ErrorCode.INVALID_PLATFORM,
            field=field,
        )
    return resolved


def validate_handle(handle: Optional[str], field: str = "handle") -> str:
    """Require a handle with something left after sanitizing.

    Returns the handle as given (trimmed); callers sanitize for lookups.
    """
    from src.social_catalog.handles import sanitize_handle

    if handle is None or not str(handle).strip():
        raise ValidationError(
            message=f"'{field}' is required",
            error_code=ErrorCode.MISSING_REQUIRED_FIELD,
            field=field,
        )
    if not sanitize_handle(handle):
        raise ValidationError(
            message=f"Invalid handle: '{handle}'",
            error_code=ErrorCode.INVALID_HANDLE,
            field=field,
        )
    return str(handle).strip()


def coerce_limit(value: Any, default: int, maximum: Optional[int] = None) -> int:
    """Coerce a limit to a positive integer.

    Missing, non-numeric and non-positive values fall back to ``default``;
    fractional values are rounded; the result is capped at ``maximum``.
    """
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(numeric) or numeric <= 0:
        return default

    limit = max(1, int(round(numeric)))
    if maximum is not None:
        limit = min(limit, maximum)
    return limit
