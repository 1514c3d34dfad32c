"""Platform Registry.

Canonical enumeration of supported social platforms, alias
resolution and display labels. Unresolvable platform strings are
signaled with ``None`` so callers decide between skipping a field
and rejecting a request.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Union
import re


class Platform(str, Enum):
    """Supported social platforms."""
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    FACEBOOK = "facebook"
    X = "x"
    YOUTUBE = "youtube"


PLATFORM_LABELS: dict[Platform, str] = {
    Platform.INSTAGRAM: "Instagram",
    Platform.TIKTOK: "TikTok",
    Platform.FACEBOOK: "Facebook",
    Platform.X: "X",
    Platform.YOUTUBE: "YouTube",
}

# Shorthands and former names
PLATFORM_ALIASES: dict[str, Platform] = {
    "twitter": Platform.X,
    "ig": Platform.INSTAGRAM,
    "fb": Platform.FACEBOOK,
    "yt": Platform.YOUTUBE,
}

_BY_ID: dict[str, Platform] = {p.value: p for p in Platform}
_BY_LABEL: dict[str, Platform] = {
    label.lower(): platform for platform, label in PLATFORM_LABELS.items()
}

_LIST_SPLIT_RE = re.compile(r"[,\s]+")


def normalize_platform(value: Union[str, Platform, None]) -> Optional[Platform]:
    """Resolve a raw platform string to its canonical Platform.

    Lookup order: canonical id, alias table, display label (all
    case-insensitive, surrounding whitespace ignored).

    Returns:
        The canonical Platform, or None when nothing matches.
    """
    if value is None:
        return None
    if isinstance(value, Platform):
        return value
    if not isinstance(value, str):
        return None

    lower = value.strip().lower()
    if not lower:
        return None
    if lower in _BY_ID:
        return _BY_ID[lower]
    if lower in PLATFORM_ALIASES:
        return PLATFORM_ALIASES[lower]
    return _BY_LABEL.get(lower)


def is_platform(value: Union[str, Platform, None]) -> bool:
    return normalize_platform(value) is not None


def get_platform_label(platform: Platform) -> str:
    """Display label for a canonical platform."""
    return PLATFORM_LABELS[Platform(platform)]


@dataclass
class ParsedPlatforms:
    """Outcome of parsing a user-supplied platform list."""
    platforms: list[Platform] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)


def parse_platform_list(raw: Union[str, Iterable[str], None]) -> ParsedPlatforms:
    """Parse a platform list such as ``"youtube, twitter x"``.

    Entries are split on commas and whitespace when given as a single
    string. Resolved platforms are de-duplicated in first-seen order;
    entries that fail to resolve are reported separately.
    """
    parsed = ParsedPlatforms()
    if raw is None:
        return parsed

    if isinstance(raw, str):
        tokens = _LIST_SPLIT_RE.split(raw)
    else:
        tokens = []
        for item in raw:
            if isinstance(item, Platform):
                tokens.append(item.value)
            elif isinstance(item, str):
                tokens.extend(_LIST_SPLIT_RE.split(item))
            else:
                tokens.append(str(item))

    for token in tokens:
        token = token.strip()
        if not token:
            continue
        platform = normalize_platform(token)
        if platform is None:
            parsed.unresolved.append(token)
        elif platform not in parsed.platforms:
            parsed.platforms.append(platform)
    return parsed
