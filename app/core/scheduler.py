from __future__ import annotations

import datetime as dt
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.errors import ScrapeFailedError
from app.core.logging import get_logger
from app.services.scrape import ScrapeService

logger = get_logger(__name__)

JOB_ID = "periodic_scrape"

async def run_scrape_job(service: ScrapeService) -> None:
    # Same path as GET /scrape, cache gate included
    try:
        result = await service.scrape()
    except ScrapeFailedError as exc:
        logger.error("scheduled_scrape_failed", error=str(exc.cause))
        return
    logger.info(
        "scheduled_scrape_done",
        from_cache=result.get("fromCache"),
        count=result.get("count"),
        storage=result.get("storage"),
    )

def start_scheduler(service: ScrapeService, interval_minutes: int) -> AsyncIOScheduler:
    if interval_minutes < 1:
        raise ValueError("SCRAPE_INTERVAL_MINUTES must be at least 1")
    scheduler = AsyncIOScheduler(timezone=dt.timezone.utc)
    scheduler.add_job(
        run_scrape_job,
        IntervalTrigger(minutes=interval_minutes),
        args=[service],
        id=JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    scheduler.start()
    logger.info("scheduler_started", interval_minutes=interval_minutes)
    return scheduler

def shutdown_scheduler(scheduler: AsyncIOScheduler | None) -> None:
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
