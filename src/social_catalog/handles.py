"""Handle Sanitizer.

Lookup keys use the sanitized form (no leading ``@``, lower-cased);
users only ever see the display form.
"""

from typing import Optional, Union

from src.social_catalog.platforms import Platform


def sanitize_handle(handle: Optional[str]) -> str:
    """Canonical lookup key for a handle: trimmed, ``@``-stripped, lower-cased.

    Example:
        sanitize_handle("@@Foo") == sanitize_handle("foo") == "foo"
    """
    if not handle:
        return ""
    return str(handle).strip().lstrip("@").lower()


def display_handle(handle: Optional[str]) -> str:
    """``@``-prefixed display form, preserving the original case.

    Returns an empty string for blank input.
    """
    if not handle:
        return ""
    trimmed = str(handle).strip()
    if not trimmed:
        return ""
    if trimmed.startswith("@"):
        return trimmed
    return f"@{trimmed}"


def ensure_handle(handle: Optional[str]) -> Optional[str]:
    """Display form for upstream values, or None when nothing usable remains."""
    shown = display_handle(handle)
    if not shown or not shown.lstrip("@"):
        return None
    return shown


def lookup_key(platform: Union[Platform, str], handle: Optional[str]) -> str:
    """Index key ``{platform}:{sanitized handle}``."""
    platform_id = platform.value if isinstance(platform, Platform) else str(platform)
    return f"{platform_id}:{sanitize_handle(handle)}"
