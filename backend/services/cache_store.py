"""Single-file JSON store for the last successful data.gov.in fetch.

The whole file is rewritten on every save: temp file in the same directory,
then os.replace, so readers see either the old envelope or the new one.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

Record = dict[str, Any]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a trailing Z."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class CacheEnvelope:
    fetched_at: str
    records: list[Record] = field(default_factory=list)
    count: int = 0

    @classmethod
    def build(cls, records: list[Record], now: datetime | None = None) -> "CacheEnvelope":
        """Stamp a fresh envelope; count always mirrors the records passed in."""
        return cls(
            fetched_at=format_timestamp(now or utc_now()),
            records=records,
            count=len(records),
        )

    @classmethod
    def from_dict(cls, data: dict) -> "CacheEnvelope":
        """Validate a decoded cache file; any malformed shape raises ValueError."""
        if not isinstance(data, dict):
            raise ValueError("Cache file is not a JSON object")
        records = data.get("records")
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise ValueError("Cache file records must be a list of objects")
        fetched_at = data.get("fetchedAt")
        if not isinstance(fetched_at, str):
            raise ValueError("Cache file fetchedAt must be a timestamp string")
        parse_timestamp(fetched_at)
        # count is derived, never trusted from disk
        return cls(fetched_at=fetched_at, records=records, count=len(records))

    def to_dict(self) -> dict:
        return {"fetchedAt": self.fetched_at, "count": self.count, "records": self.records}

    def age_seconds(self, now: datetime | None = None) -> float:
        return ((now or utc_now()) - parse_timestamp(self.fetched_at)).total_seconds()

    def is_stale(self, ttl_seconds: float, now: datetime | None = None) -> bool:
        return self.age_seconds(now) > ttl_seconds


class CacheStore:
    """Reads and atomically rewrites one cache file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def ensure_directory(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> CacheEnvelope | None:
        """Return the stored envelope, or None if missing or unreadable."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return CacheEnvelope.from_dict(json.load(f))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Ignoring unreadable cache file %s: %s", self.path, e)
            return None

    def save(self, envelope: CacheEnvelope) -> None:
        self.ensure_directory()
        fd, temp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".mgnrega-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(envelope.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(temp_path, self.path)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise
