"""Federated Search Aggregator.

Fans one free-text query out to one adapter per platform, concurrently,
and folds the outcomes into a single response. A failing, slow or
unconfigured provider costs its own results and adds one SearchIssue;
it never aborts the other calls or the search as a whole.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union
import asyncio
import logging
import time

from src.api_errors.validators import coerce_limit
from src.federated_search.base import AdapterError, AdapterNotConfiguredError, SearchAdapter
from src.logging_config import log_performance
from src.social_catalog.models import UNKNOWN_PLATFORM, FederatedResult, SearchIssue
from src.social_catalog.platforms import Platform, get_platform_label, parse_platform_list

logger = logging.getLogger(__name__)

DEFAULT_FEDERATED_PLATFORMS = [Platform.YOUTUBE, Platform.X, Platform.FACEBOOK]


@dataclass
class AggregatorConfig:
    """Configuration for federated search."""
    default_platforms: list[Platform] = field(default_factory=lambda: list(DEFAULT_FEDERATED_PLATFORMS))
    default_limit: int = 10
    max_limit: int = 25
    adapter_timeout: float = 10.0  # seconds per adapter call


@dataclass
class PlatformOutcome:
    """Settled outcome of one adapter call."""
    platform: Platform
    results: list[FederatedResult] = field(default_factory=list)
    issue: Optional[SearchIssue] = None
    duration_ms: float = 0.0


@dataclass
class FederatedSearchResponse:
    """Combined result of one federated search."""
    query: str
    platforms: list[Platform] = field(default_factory=list)
    limit: int = 0
    results: list[FederatedResult] = field(default_factory=list)
    issues: list[SearchIssue] = field(default_factory=list)
    duration_ms: float = 0.0

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "q": self.query,
            "platforms": [p.value for p in self.platforms],
            "limit": self.limit,
            "results": [r.to_dict() for r in self.results],
            "issues": [i.to_dict() for i in self.issues],
        }
        if self.issues:
            data["errors"] = data["issues"]
        return data


class FederatedSearchAggregator:
    """Runs one search across several provider adapters.

    Results are concatenated in platform-resolution order, each
    platform capped at ``limit``; there is no global re-ranking.

    Example:
        agg = FederatedSearchAggregator()
        agg.add_adapter(YouTubeSearchAdapter(api_key="..."))
        agg.add_adapter(XSearchAdapter(bearer_token="..."))
        response = await agg.search("mkbhd", ["youtube", "twitter"], limit=5)
        print(response.results, response.issues)
    """

    def __init__(
        self,
        config: Optional[AggregatorConfig] = None,
        adapters: Optional[Iterable[SearchAdapter]] = None,
    ):
        self._config = config or AggregatorConfig()
        self._adapters: dict[Platform, SearchAdapter] = {}
        for adapter in adapters or []:
            self.add_adapter(adapter)

    @property
    def config(self) -> AggregatorConfig:
        return self._config

    @property
    def adapters(self) -> dict[Platform, SearchAdapter]:
        return dict(self._adapters)

    def add_adapter(self, adapter: SearchAdapter) -> None:
        """Register an adapter; replaces any adapter for the same platform."""
        self._adapters[adapter.platform] = adapter

    def remove_adapter(self, platform: Platform) -> None:
        self._adapters.pop(platform, None)

    def resolve_platforms(
        self,
        platforms: Union[str, Iterable[Any], None],
    ) -> tuple[list[Platform], list[SearchIssue]]:
        """Resolve requested platforms, reporting entries that do not resolve.

        Falls back to the configured default subset when nothing resolves.
        """
        parsed = parse_platform_list(platforms)
        issues = [
            SearchIssue(platform=UNKNOWN_PLATFORM, message=f"Unknown platform: '{raw}'")
            for raw in parsed.unresolved
        ]
        resolved = parsed.platforms or list(self._config.default_platforms)
        return resolved, issues

    def clamp_limit(self, limit: Any) -> int:
        return coerce_limit(limit, default=self._config.default_limit, maximum=self._config.max_limit)

    @log_performance()
    async def search(
        self,
        query: Optional[str],
        platforms: Union[str, Iterable[Any], None] = None,
        limit: Any = None,
    ) -> FederatedSearchResponse:
        """Fan ``query`` out to every resolved platform and wait for all.

        Never raises because of a provider: failures come back as issues.
        An empty query returns an empty response without calling anything.
        """
        start = time.monotonic()
        text = (query or "").strip()
        count = self.clamp_limit(limit)
        if not text:
            return FederatedSearchResponse(query="", limit=count)

        resolved, issues = self.resolve_platforms(platforms)
        outcomes = await asyncio.gather(*(
            self._execute(platform, text, count) for platform in resolved
        ))

        response = FederatedSearchResponse(query=text, platforms=resolved, limit=count, issues=issues)
        for outcome in outcomes:
            response.results.extend(outcome.results)
            if outcome.issue is not None:
                response.issues.append(outcome.issue)
        response.duration_ms = (time.monotonic() - start) * 1000

        if response.issues:
            logger.info(
                "Federated search '%s': %d results, %d issues",
                text,
                len(response.results),
                len(response.issues),
                extra={"query": text, "issues": len(response.issues)},
            )
        return response

    async def _execute(self, platform: Platform, query: str, limit: int) -> PlatformOutcome:
        """Run one adapter; every failure mode becomes a single issue."""
        start = time.monotonic()
        label = get_platform_label(platform)
        adapter = self._adapters.get(platform)
        if adapter is None:
            return self._failed(platform, f"No search adapter available for {label}.", start)

        try:
            results = await asyncio.wait_for(
                adapter.search(query, limit),
                timeout=self._config.adapter_timeout,
            )
        except asyncio.TimeoutError:
            return self._failed(
                platform,
                f"{label} search timed out after {self._config.adapter_timeout:g}s.",
                start,
            )
        except AdapterNotConfiguredError as e:
            return self._failed(platform, e.message, start)
        except AdapterError as e:
            return self._failed(platform, e.message or f"{label} search unavailable.", start)
        except Exception as e:
            logger.exception("Adapter for %s raised unexpectedly", platform.value)
            message = str(e).strip() or f"{label} search unavailable."
            return self._failed(platform, message, start)

        return PlatformOutcome(
            platform=platform,
            results=list(results or [])[:limit],
            duration_ms=(time.monotonic() - start) * 1000,
        )

    @staticmethod
    def _failed(platform: Platform, message: str, start: float) -> PlatformOutcome:
        logger.warning("%s search issue: %s", platform.value, message, extra={"platform": platform.value})
        return PlatformOutcome(
            platform=platform,
            issue=SearchIssue(platform=platform, message=message),
            duration_ms=(time.monotonic() - start) * 1000,
        )
