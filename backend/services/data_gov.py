"""data.gov.in client for the MGNREGA resource.

Free government open-data API; requires an api-key query parameter. Returns
up to `limit` rows under a top-level "records" key.
"""

import asyncio
import logging

import httpx

from config import Settings
from errors import UpstreamError
from services.cache_store import CacheEnvelope, CacheStore, Record

logger = logging.getLogger(__name__)


class DataGovFetcher:
    """Fetches the full record set and overwrites the cache file with it."""

    def __init__(
        self,
        settings: Settings,
        store: CacheStore,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.store = store
        self._transport = transport
        self._write_lock = asyncio.Lock()

    async def fetch_records(self) -> list[Record]:
        params = {
            "api-key": self.settings.data_gov_api_key or "",
            "format": "json",
            "limit": self.settings.data_gov_limit,
        }
        async with httpx.AsyncClient(
            timeout=self.settings.upstream_timeout, transport=self._transport
        ) as client:
            try:
                resp = await client.get(self.settings.data_gov_base_url, params=params)
                resp.raise_for_status()
                data = resp.json()
            except httpx.TimeoutException as e:
                raise UpstreamError(f"data.gov.in timed out after {self.settings.upstream_timeout}s") from e
            except httpx.HTTPError as e:
                raise UpstreamError(f"data.gov.in request failed: {e}") from e
            except ValueError as e:
                raise UpstreamError("data.gov.in returned a non-JSON body") from e

        if not isinstance(data, dict) or not isinstance(data.get("records"), list):
            raise UpstreamError("Invalid API response format")
        return data["records"]

    async def refresh(self) -> CacheEnvelope:
        """Fetch, stamp with the current time, and rewrite the cache file."""
        logger.info("Fetching latest data from data.gov.in")
        try:
            records = await self.fetch_records()
        except UpstreamError as e:
            logger.error("Error fetching from data.gov.in: %s", e)
            raise

        envelope = CacheEnvelope.build(records)
        async with self._write_lock:
            self.store.save(envelope)
        logger.info("Cache updated: %d records at %s", envelope.count, envelope.fetched_at)
        return envelope
