"""Periodic refresh of every registered feed into the cache."""

import asyncio
from datetime import datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
import structlog

from ..config.registry import RegistryStore
from ..config.settings import settings
from ..exceptions import FetchError
from ..ingestion.interfaces import FetcherInterface, RegistryEntry
from ..storage.cache import FeedCache

logger = structlog.get_logger()


class RefreshScheduler:
    """Runs fetch -> persist for every registry entry, now and then on a fixed period.

    Each pass issues one independent unit of work per feed. Passes are not
    serialized: a tick fires even if the previous pass is still running.
    """

    JOB_ID = "refresh_feeds"

    def __init__(
        self,
        registry: RegistryStore,
        fetcher: FetcherInterface,
        cache: FeedCache,
        interval_seconds: int = None,
        scheduler: AsyncIOScheduler = None,
    ):
        self.registry = registry
        self.fetcher = fetcher
        self.cache = cache
        self.interval_seconds = interval_seconds or settings.refresh_interval_seconds
        self.scheduler = scheduler or AsyncIOScheduler()
        self.running_passes = 0

    def start(self):
        """Schedule the periodic job with an immediate first pass."""
        self.scheduler.add_job(
            self.run_pass,
            IntervalTrigger(seconds=self.interval_seconds),
            id=self.JOB_ID,
            name='Refresh cached feeds',
            replace_existing=True,
            next_run_time=datetime.now(),
            max_instances=settings.refresh_max_overlapping_passes,
            coalesce=False,
        )
        self.scheduler.start()
        logger.info("scheduler_started", interval_seconds=self.interval_seconds)

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")

    async def run_pass(self) -> dict:
        """Refresh every feed concurrently and report how many succeeded."""
        entries = self.registry.list()
        self.running_passes += 1
        logger.info("refresh_pass_started", feeds=len(entries), running_passes=self.running_passes)
        start = datetime.now()

        try:
            results = await asyncio.gather(
                *(self.refresh_one(e) for e in entries),
                return_exceptions=True
            )
        finally:
            self.running_passes -= 1

        refreshed = 0
        for entry, result in zip(entries, results):
            if isinstance(result, BaseException):
                logger.error(
                    "refresh_exception",
                    feed=entry.name,
                    error_type=type(result).__name__,
                    error=str(result)
                )
            elif result:
                refreshed += 1

        stats = {"refreshed": refreshed, "failed": len(entries) - refreshed}
        logger.info(
            "refresh_pass_completed",
            elapsed_seconds=(datetime.now() - start).total_seconds(),
            **stats
        )
        return stats

    async def refresh_one(self, entry: RegistryEntry) -> bool:
        """Fetch and persist a single feed. Failures are logged, not raised."""
        try:
            feed = await self.fetcher.fetch(entry.url)
        except FetchError as e:
            logger.warning("refresh_skipped", feed=entry.name, url=entry.url, error=str(e))
            return False

        try:
            self.cache.persist(entry, feed)
        except OSError as e:
            logger.error("cache_write_failed", feed=entry.name, error=str(e))
            return False
        return True
