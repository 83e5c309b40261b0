"""Read and filter paths over the cached MGNREGA dataset.

Freshness policy: any cache on disk is served immediately. A stale cache
(older than the TTL) also kicks off a background refresh that the request
never waits for. Only a cold start (no file) blocks on data.gov.in.
"""

import asyncio
import logging

from errors import NoCacheError, UpstreamError
from services.cache_store import CacheEnvelope, CacheStore, Record
from services.data_gov import DataGovFetcher

logger = logging.getLogger(__name__)

STATE_FIELDS = ("state_name", "state")
DISTRICT_FIELD = "district_name"

SCHEDULED = "scheduled"


def _field_equals(record: Record, field: str, wanted: str) -> bool:
    value = record.get(field)
    return isinstance(value, str) and value.lower() == wanted


def filter_records(
    records: list[Record], state: str | None = None, district: str | None = None
) -> list[Record]:
    """Case-insensitive exact match; state checks state_name or state, filters AND together."""
    filtered = records
    if state:
        wanted = state.lower()
        filtered = [r for r in filtered if any(_field_equals(r, f, wanted) for f in STATE_FIELDS)]
    if district:
        wanted = district.lower()
        filtered = [r for r in filtered if _field_equals(r, DISTRICT_FIELD, wanted)]
    return filtered


class MgnregaService:
    def __init__(self, store: CacheStore, fetcher: DataGovFetcher, ttl_seconds: float):
        self.store = store
        self.fetcher = fetcher
        self.ttl_seconds = ttl_seconds
        self._background: set[asyncio.Task] = set()
        self._refresh_task: asyncio.Task | None = None

    @property
    def refresh_in_flight(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    async def get_records(self) -> dict:
        """Serve from cache (refreshing in the background if stale) or fetch live on cold start."""
        envelope = self.store.load()
        if envelope is not None:
            if envelope.is_stale(self.ttl_seconds):
                logger.info("Cache from %s is stale, refreshing in background", envelope.fetched_at)
                self.refresh_in_background(reason="stale cache")
            return {"source": "cache", "lastUpdated": envelope.fetched_at, "data": envelope.records}

        logger.info("No cache on disk, fetching live")
        try:
            envelope = await self.fetcher.refresh()
        except UpstreamError as e:
            raise NoCacheError("API unavailable and no cache found.", status_code=500) from e
        return {"source": "live", "lastUpdated": envelope.fetched_at, "data": envelope.records}

    def filter_records(self, state: str | None = None, district: str | None = None) -> dict:
        envelope = self.store.load()
        if envelope is None:
            raise NoCacheError()

        filtered = filter_records(envelope.records, state=state, district=district)
        return {
            "source": "cache",
            "lastUpdated": envelope.fetched_at,
            "count": len(filtered),
            "data": filtered,
        }

    def refresh_in_background(self, reason: str) -> asyncio.Task:
        """Start a refresh without awaiting it. Reuses the stale-refresh task already running."""
        if self.refresh_in_flight:
            logger.debug("Background refresh already running, not starting another")
            return self._refresh_task

        self._refresh_task = self.spawn_refresh(reason)
        return self._refresh_task

    def spawn_refresh(self, reason: str) -> asyncio.Task:
        task = asyncio.create_task(self.fetcher.refresh())
        self._background.add(task)
        task.add_done_callback(lambda t: self._on_refresh_done(t, reason))
        return task

    def _on_refresh_done(self, task: asyncio.Task, reason: str) -> None:
        self._background.discard(task)
        if task.cancelled():
            logger.warning("Background refresh (%s) was cancelled", reason)
            return
        exc = task.exception()
        if exc is not None:
            if reason == SCHEDULED:
                logger.warning("Failed to refresh cache during scheduled job: %s", exc)
            else:
                logger.warning("Background refresh (%s) failed: %s", reason, exc)
            return
        envelope: CacheEnvelope = task.result()
        logger.info("Background refresh (%s) stored %d records", reason, envelope.count)

    def cache_status(self) -> dict:
        envelope = self.store.load()
        if envelope is None:
            return {"cache": "absent", "lastUpdated": None, "count": 0, "stale": None}
        return {
            "cache": "present",
            "lastUpdated": envelope.fetched_at,
            "count": envelope.count,
            "stale": envelope.is_stale(self.ttl_seconds),
        }

    async def shutdown(self) -> None:
        """Let in-flight refreshes finish writing before the loop closes."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
