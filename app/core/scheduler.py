import logging
import os
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.core.cache import CacheRegistry
from app.core.config import settings

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def start_scheduler(caches: CacheRegistry):
    if os.getenv("TESTING") == "true":
        logger.info("Scheduler disabled in test environment")
        return

    if not scheduler.running:
        caches.schedule_sweeps(scheduler, settings.CACHE_SWEEP_INTERVAL)
        scheduler.start()
        logger.info(
            f"Scheduler started with cache sweeps every {settings.CACHE_SWEEP_INTERVAL}s "
            f"for {', '.join(caches.names())}"
        )


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
