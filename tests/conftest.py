"""Shared test fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

BACKEND_DIR = Path(__file__).resolve().parents[1] / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from config import Settings  # noqa: E402
from services.cache_store import CacheStore  # noqa: E402


SAMPLE_RECORDS = [
    {"state": "UP", "district": "Agra", "district_name": "Agra", "fin_year": "2024-2025"},
    {"state": "UP", "district": "Kanpur", "district_name": "Kanpur", "fin_year": "2024-2025"},
    {"state": "MP", "district": "Agra", "district_name": "Agra", "fin_year": "2024-2025"},
]


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointed at a throwaway cache directory."""
    s = Settings()
    s.cache_dir = tmp_path / "cache"
    s.cache_file = "mgnrega_data.json"
    s.data_gov_base_url = "https://upstream.test/resource/mgnrega"
    s.data_gov_api_key = "test-key"
    s.cache_ttl_seconds = 60 * 60 * 24
    s.environment = "test"
    return s


@pytest.fixture
def store(test_settings: Settings) -> CacheStore:
    return CacheStore(test_settings.cache_path)


@pytest.fixture
def sample_records() -> list[dict]:
    return [dict(r) for r in SAMPLE_RECORDS]
