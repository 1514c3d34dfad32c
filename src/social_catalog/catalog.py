"""Profile Catalog.

Owns the in-memory indexes built from a collection of raw influencer
records:

- a point-lookup map from ``{platform}:{sanitized handle}`` to profile
- a flat list of search entries, one per (profile, platform account)

Rebuilds are never incremental. ``reload()`` normalizes every record
into fresh structures and swaps them in with a single assignment, so
readers always see either the previous snapshot or the new one.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional, Union
import json
import logging

from src.logging_config import PerformanceTimer
from src.social_catalog.config import CatalogConfig
from src.social_catalog.handles import display_handle, lookup_key, sanitize_handle
from src.social_catalog.models import InfluencerProfile, SearchIndexEntry, round_half_up
from src.social_catalog.normalizer import NormalizationError, normalize_record
from src.social_catalog.platforms import Platform

logger = logging.getLogger(__name__)


class DatasetError(Exception):
    """Raised when a dataset file cannot be read or has the wrong shape."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path


@dataclass(frozen=True)
class CatalogSnapshot:
    """One consistent generation of the catalog indexes."""
    profiles: tuple[InfluencerProfile, ...] = ()
    lookup: Mapping[str, InfluencerProfile] = field(default_factory=lambda: MappingProxyType({}))
    entries: tuple[SearchIndexEntry, ...] = ()


@dataclass
class DroppedRecord:
    index: int
    reason: str
    record_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {"index": self.index, "recordId": self.record_id, "reason": self.reason}


@dataclass
class CatalogLoadReport:
    """Summary of one catalog rebuild."""
    records_seen: int = 0
    profiles_kept: int = 0
    indexed_keys: int = 0
    search_entries: int = 0
    dropped: list[DroppedRecord] = field(default_factory=list)
    duplicate_keys: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "recordsSeen": self.records_seen,
            "profilesKept": self.profiles_kept,
            "indexedKeys": self.indexed_keys,
            "searchEntries": self.search_entries,
            "dropped": [d.to_dict() for d in self.dropped],
            "duplicateKeys": list(self.duplicate_keys),
        }


def load_records(path: Union[str, Path]) -> list[Any]:
    """Read raw influencer records from a JSON dataset file.

    Accepts either ``{"influencers": [...]}`` or a bare list.

    Raises:
        DatasetError: If the file is missing, is not valid JSON, or has
            neither accepted shape.
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise DatasetError(f"Dataset not found: {path}", path=str(path)) from e
    except (OSError, json.JSONDecodeError) as e:
        raise DatasetError(f"Could not read dataset {path}: {e}", path=str(path)) from e

    if isinstance(data, Mapping):
        data = data.get("influencers")
    if not isinstance(data, list):
        raise DatasetError(
            f"Dataset {path} must be a list or an object with an 'influencers' list",
            path=str(path),
        )
    return data


def build_search_entry(
    profile: InfluencerProfile,
    platform: Platform,
    precision: int = 1,
) -> Optional[SearchIndexEntry]:
    """Search projection of one profile account, or None if it has no handle."""
    account = profile.account(platform)
    if account is None or not account.handle:
        return None

    data = profile.platform_data(platform)
    metrics = data.metrics if data is not None else None
    followers = metrics.followers if metrics is not None else 0
    engagement = metrics.avg_engagement if metrics is not None else 0.0
    normalized = sanitize_handle(account.handle)

    return SearchIndexEntry(
        id=lookup_key(platform, account.handle),
        platform=platform,
        handle=display_handle(account.handle),
        display_name=profile.display_name,
        followers=followers,
        engagement_rate=round_half_up(engagement, precision),
        location=profile.location,
        topics=list(profile.topics) if profile.topics is not None else None,
        verified=profile.verified,
        normalized_handle=normalized,
    )


class ProfileCatalog:
    """Rebuildable profile index.

    Example:
        catalog = ProfileCatalog.from_json_file("data/mock_social_data.json")
        profile = catalog.lookup(Platform.INSTAGRAM, "@Alice")
        report = catalog.reload(new_records)
    """

    def __init__(
        self,
        records: Optional[Iterable[Any]] = None,
        config: Optional[CatalogConfig] = None,
    ):
        self._config = config or CatalogConfig()
        self._snapshot = CatalogSnapshot()
        self._last_report: Optional[CatalogLoadReport] = None
        if records is not None:
            self.reload(records)

    @classmethod
    def from_json_file(
        cls,
        path: Union[str, Path],
        config: Optional[CatalogConfig] = None,
    ) -> "ProfileCatalog":
        return cls(load_records(path), config=config)

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def last_report(self) -> Optional[CatalogLoadReport]:
        return self._last_report

    @property
    def profiles(self) -> tuple[InfluencerProfile, ...]:
        return self._snapshot.profiles

    @property
    def entries(self) -> tuple[SearchIndexEntry, ...]:
        return self._snapshot.entries

    def __len__(self) -> int:
        return len(self._snapshot.profiles)

    def lookup(self, platform: Union[Platform, str], handle: Optional[str]) -> Optional[InfluencerProfile]:
        return self._snapshot.lookup.get(lookup_key(platform, handle))

    def get_by_id(self, profile_id: str) -> Optional[InfluencerProfile]:
        """Profile by its source record id; also finds profiles with no indexed account."""
        for profile in self._snapshot.profiles:
            if profile.id is not None and profile.id == str(profile_id):
                return profile
        return None

    def reload(self, records: Iterable[Any]) -> CatalogLoadReport:
        """Rebuild both indexes from scratch and swap them in.

        Malformed records are dropped and reported; they never abort the
        load. If anything else goes wrong the previous snapshot stays.
        """
        with PerformanceTimer("catalog_reload", log=logger):
            snapshot, report = self._build(records)
        self._snapshot = snapshot
        self._last_report = report

        logger.info(
            "Catalog rebuilt: %d/%d records kept, %d keys, %d search entries",
            report.profiles_kept,
            report.records_seen,
            report.indexed_keys,
            report.search_entries,
        )
        return report

    def _build(self, records: Iterable[Any]) -> tuple[CatalogSnapshot, CatalogLoadReport]:
        report = CatalogLoadReport()
        profiles: list[InfluencerProfile] = []
        lookup: dict[str, InfluencerProfile] = {}
        entries: list[SearchIndexEntry] = []

        for index, record in enumerate(records):
            report.records_seen += 1
            try:
                profile = normalize_record(record)
            except NormalizationError as e:
                logger.warning("Dropping dataset record %d (%s): %s", index, e.record_id, e.message)
                report.dropped.append(DroppedRecord(index=index, reason=e.message, record_id=e.record_id))
                continue

            profiles.append(profile)
            for platform in profile.accounts:
                entry = build_search_entry(profile, platform, self._config.engagement_precision)
                if entry is None:
                    continue

                if entry.id in lookup:
                    report.duplicate_keys.append(entry.id)
                    logger.warning(
                        "Duplicate lookup key %s (record %s); %s",
                        entry.id,
                        profile.id,
                        "keeping the first record" if self._config.deduplicate_keys else "last record wins",
                    )
                    if self._config.deduplicate_keys:
                        continue
                    lookup[entry.id] = profile
                else:
                    lookup[entry.id] = profile
                entries.append(entry)

        report.profiles_kept = len(profiles)
        report.indexed_keys = len(lookup)
        report.search_entries = len(entries)

        snapshot = CatalogSnapshot(
            profiles=tuple(profiles),
            lookup=MappingProxyType(lookup),
            entries=tuple(entries),
        )
        return snapshot, report
