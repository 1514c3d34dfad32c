"""Federated Search Base.

Adapter protocol, adapter errors and helpers shared by every provider
integration. An adapter answers ``search(query, limit)`` for exactly
one platform; the aggregator never branches on provider identity.
"""

from typing import Any, Awaitable, Callable, Optional, Protocol, Union, runtime_checkable
import inspect
import logging
import math
import re
import time

import httpx

from src.social_catalog.handles import ensure_handle, sanitize_handle
from src.social_catalog.models import FederatedResult
from src.social_catalog.platforms import Platform, get_platform_label

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


class AdapterError(Exception):
    """An upstream provider call failed.

    ``status`` carries the upstream HTTP status when there was one.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class AdapterNotConfiguredError(AdapterError):
    """A provider cannot run because a credential or setting is missing."""

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(message)
        self.setting = setting


@runtime_checkable
class SearchAdapter(Protocol):
    """Protocol that every provider adapter implements."""

    @property
    def platform(self) -> Platform:
        """Platform served by this adapter."""
        ...

    async def search(self, query: str, limit: int) -> list[FederatedResult]:
        """Find accounts matching ``query``, at most ``limit`` of them."""
        ...


SearchFunction = Callable[[str, int], Union[list[FederatedResult], Awaitable[list[FederatedResult]]]]


class FunctionAdapter:
    """Adapter around a plain (sync or async) ``fn(query, limit)`` callable.

    Example:
        aggregator.add_adapter(FunctionAdapter(Platform.X, my_search))
    """

    def __init__(self, platform: Platform, fn: SearchFunction):
        self._platform = platform
        self._fn = fn

    @property
    def platform(self) -> Platform:
        return self._platform

    async def search(self, query: str, limit: int) -> list[FederatedResult]:
        result = self._fn(query, limit)
        if inspect.isawaitable(result):
            result = await result
        return list(result or [])


# ═══════════════════════════════════════════════════════════════════════
# Result helpers
# ═══════════════════════════════════════════════════════════════════════


def parse_followers(value: Any) -> Optional[int]:
    """Follower count as a non-negative int, or None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(numeric) or numeric < 0:
        return None
    return int(round(numeric))


def build_result(
    platform: Platform,
    id: Optional[str] = None,
    name: Optional[str] = None,
    handle: Optional[str] = None,
    avatar: Optional[str] = None,
    profile_url: Optional[str] = None,
    followers: Any = None,
    verified: Optional[bool] = None,
    note: Optional[str] = None,
) -> FederatedResult:
    """Build a FederatedResult, filling what the provider left out.

    Missing ids become ``{platform}:{handle}`` (or a timestamp when
    there is no handle either); missing names fall back to the handle,
    then the platform label.
    """
    shown = ensure_handle(handle)
    if not id:
        suffix = sanitize_handle(shown) if shown else str(int(time.time() * 1000))
        id = f"{platform.value}:{suffix}"
    return FederatedResult(
        platform=platform,
        id=str(id),
        name=name or shown or get_platform_label(platform),
        handle=shown,
        avatar=avatar or None,
        profile_url=profile_url or None,
        followers=parse_followers(followers),
        verified=verified if isinstance(verified, bool) else None,
        note=note or None,
    )


def require_exact_handle(query: str, platform: Platform) -> str:
    """Sanitized handle for providers that only support ``@handle`` lookups.

    Raises:
        AdapterError: If the query is not an ``@handle`` or is empty after it.
    """
    label = get_platform_label(platform)
    if not query.startswith("@"):
        raise AdapterError(
            f"{label} needs an exact @handle (e.g. @creator). Type the full username."
        )
    handle = sanitize_handle(query)
    if not handle:
        raise AdapterError(f"Invalid {label} handle.")
    return handle


# ═══════════════════════════════════════════════════════════════════════
# HTTP helpers
# ═══════════════════════════════════════════════════════════════════════


def _snippet(text: str, length: int = 160) -> str:
    return _WHITESPACE_RE.sub(" ", text)[:length]


def _error_message(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    if isinstance(error, str):
        return error
    errors = data.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        message = errors[0].get("message")
        if isinstance(message, str):
            return message
    return None


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    params: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
) -> Any:
    """GET a JSON document.

    Raises:
        AdapterError: On transport failures, non-JSON bodies and non-2xx
            responses (with the upstream status and message when present).
    """
    try:
        response = await client.get(url, params=params, headers=headers)
    except httpx.TimeoutException as e:
        raise AdapterError(f"Request to {url} timed out") from e
    except httpx.HTTPError as e:
        raise AdapterError(f"Request to {url} failed: {e}") from e

    text = response.text
    data = None
    if text:
        try:
            data = response.json()
        except ValueError as e:
            raise AdapterError(
                f"Invalid JSON response ({url}): {_snippet(text)}",
                status=response.status_code,
            ) from e

    if not response.is_success:
        message = _error_message(data) or _snippet(text) or f"Request failed ({response.status_code})"
        raise AdapterError(message, status=response.status_code)
    return data


class HttpSearchAdapter:
    """Base for adapters talking to a remote API through httpx.

    A shared ``httpx.AsyncClient`` may be injected; otherwise each call
    opens (and closes) its own client with the configured timeout.
    """

    platform: Platform

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0):
        self._client = client
        self._timeout = timeout

    async def search(self, query: str, limit: int) -> list[FederatedResult]:
        self._check_configured()
        return await self._with_client(self._search, query, limit)

    async def _with_client(self, fn: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        """Run ``fn(client, *args)`` on the shared client or a short-lived one."""
        if self._client is not None:
            return await fn(self._client, *args)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await fn(client, *args)

    def _check_configured(self) -> None:
        """Raise AdapterNotConfiguredError when credentials are missing."""

    async def _search(self, client: httpx.AsyncClient, query: str, limit: int) -> list[FederatedResult]:
        raise NotImplementedError
