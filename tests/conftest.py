"""Pytest configuration and shared fixtures."""

import copy
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

BUNDLED_DATASET = project_root / "data" / "mock_social_data.json"

RAW_RECORDS = [
    {
        "id": "alice",
        "displayName": "Alice Wander",
        "location": "Lisbon, Portugal",
        "topics": ["Travel", "food"],
        "verified": True,
        "accounts": {
            "instagram": {"handle": "@Alice", "displayName": "Alice W."},
            "twitter": {"handle": "alice_tweets"},
        },
        "summary": {"growthSeries": [1, 2, 3], "engagementByFormat": {"Reel": 70.0}},
        "platforms": {
            "instagram": {
                "metrics": {"followers": 1000, "weeklyDelta": 1.5, "avgEngagement": 4.25, "posts7d": 3},
                "followersSeries": [
                    {"period": f"2024-W{week:02d}", "followers": 900 + week * 10}
                    for week in range(1, 13)
                ],
                "engagementByFormat": {"Reel": 60.0, "Photo": 40.0},
                "posts": [
                    {"id": "p1", "title": "Tram 28", "likes": 10, "comments": 2, "date": "2024-05-01T10:00:00Z", "format": "Reel"},
                    {"id": "p2", "title": "Pastel de nata", "likes": 20, "comments": 4, "date": "2024-05-02T10:00:00Z"},
                    {"id": "p3", "title": "Sunset", "likes": 30, "comments": 6, "date": "2024-05-03T10:00:00Z"},
                ],
            },
            "twitter": {
                "metrics": {"followers": 250, "weeklyDelta": -0.5, "avgEngagement": 0.8, "posts7d": 9},
            },
        },
    },
    {
        "id": "bruno",
        "displayName": "Bruno Beats",
        "location": "Berlin, Germany",
        "topics": ["music"],
        "accounts": {
            "YouTube": {"handle": "brunobeats"},
            "instagram": {"handle": "@bruno.beats"},
        },
        "platforms": {
            "yt": {"metrics": {"followers": 5000, "avgEngagement": 2.0}},
            "instagram": {"metrics": {"followers": 3000, "avgEngagement": 3.33}},
        },
    },
    {
        "id": "carla",
        "displayName": "Carla Code",
        "topics": ["tech", "travel"],
        "accounts": {"instagram": {"handle": "carlacodes"}},
        "platforms": {"instagram": {"metrics": {"followers": 3000, "avgEngagement": 5.0}}},
    },
]


@pytest.fixture
def raw_records():
    """Fresh deep copy of the sample records for each test."""
    return copy.deepcopy(RAW_RECORDS)


@pytest.fixture
def catalog(raw_records):
    from src.social_catalog import ProfileCatalog
    return ProfileCatalog(raw_records)


@pytest.fixture
def queries(catalog):
    from src.social_catalog import QueryService
    return QueryService(catalog)


@pytest.fixture
def dataset_file(tmp_path, raw_records):
    import json
    path = tmp_path / "dataset.json"
    path.write_text(json.dumps({"influencers": raw_records}), encoding="utf-8")
    return path


@pytest.fixture
def bundled_dataset():
    return BUNDLED_DATASET
