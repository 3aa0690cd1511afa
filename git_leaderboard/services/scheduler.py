"""Periodic auto-refresh using APScheduler.

Each tick invalidates the response cache and re-runs the stats pipeline.
Refreshes are single-flight: a tick that fires while a run is still in
progress is skipped rather than starting a second concurrent run.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from git_leaderboard.config import settings
from git_leaderboard.services.github import ResponseCache

logger = logging.getLogger(__name__)

AUTO_REFRESH_JOB_ID = "auto_refresh"


class AutoRefreshScheduler:
    """Manages the APScheduler instance driving periodic refreshes."""

    def __init__(
        self,
        refresh: Callable[[], Awaitable[Any]],
        cache: ResponseCache | None = None,
        interval_minutes: int = settings.auto_refresh_minutes,
        enabled: bool | None = None,
    ) -> None:
        self._refresh = refresh
        self.cache = cache
        self.interval_minutes = interval_minutes
        self.enabled = settings.scheduler_enabled if enabled is None else enabled
        self._lock = asyncio.Lock()
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def is_refreshing(self) -> bool:
        return self._lock.locked()

    async def run_refresh(self, clear_cache: bool = True) -> Any | None:
        """
        Run one refresh unless another one is in progress.

        Returns the refresh result, or None if skipped or failed.
        """
        if self._lock.locked():
            logger.info("[scheduler] Auto-refresh: skipped (a run is already in progress)")
            return None

        async with self._lock:
            logger.info("[scheduler] Auto-refresh: starting")
            if clear_cache and self.cache is not None:
                self.cache.clear()

            try:
                result = await self._refresh()
            except Exception as e:
                logger.exception(f"[scheduler] Auto-refresh: failed with error: {e}")
                return None

            logger.info("[scheduler] Auto-refresh: completed")
            return result

    def start(self) -> None:
        """Start the scheduler and register the refresh job."""
        if not self.enabled:
            logger.info("[scheduler] Disabled via SCHEDULER_ENABLED=false")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.run_refresh,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=AUTO_REFRESH_JOB_ID,
            name="Leaderboard Auto-Refresh",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(f"[scheduler] Started with auto-refresh every {self.interval_minutes} min")

    def stop(self) -> None:
        """Gracefully shut down the scheduler."""
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("[scheduler] Stopped")
