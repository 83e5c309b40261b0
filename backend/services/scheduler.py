"""Daily cache refresh, independent of the TTL check on the read path.

Uses a private schedule.Scheduler polled from an asyncio task, so jobs run on
the event loop and can spawn the async refresh directly.
"""

import asyncio
import logging

import schedule

from services.mgnrega import SCHEDULED, MgnregaService

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 30


class DailyRefreshScheduler:
    def __init__(self, service: MgnregaService, refresh_at: str = "04:00", poll_interval: float = POLL_INTERVAL_SECONDS):
        self.service = service
        self.refresh_at = refresh_at
        self.poll_interval = poll_interval
        self._scheduler = schedule.Scheduler()
        self.job = self._scheduler.every().day.at(refresh_at).do(self._fire)
        self._loop_task: asyncio.Task | None = None

    @property
    def next_run(self):
        return self.job.next_run

    def _fire(self) -> None:
        # Unconditional: no skip-if-recent, no coordination with the TTL refresh.
        logger.info("Scheduled cache refresh starting")
        self.service.spawn_refresh(reason=SCHEDULED)

    def run_pending(self) -> None:
        self._scheduler.run_pending()

    async def _run(self) -> None:
        while True:
            self.run_pending()
            await asyncio.sleep(self.poll_interval)

    def start(self) -> None:
        if self._loop_task is not None:
            raise RuntimeError("Scheduler already started")
        logger.info("Daily refresh scheduled at %s local, next run %s", self.refresh_at, self.next_run)
        self._loop_task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._loop_task is None:
            return
        self._loop_task.cancel()
        try:
            await self._loop_task
        except asyncio.CancelledError:
            pass
        self._loop_task = None
