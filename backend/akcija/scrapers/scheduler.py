"""APScheduler-based daily run.

One cron job runs the full pipeline (all list passes, then all detail
passes). The job never overlaps itself.
"""

from typing import Optional

import structlog
from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from akcija.config import settings
from akcija.scrapers.scraper_service import RunSummary, ScraperService

logger = structlog.get_logger(__name__)

JOB_ID = "daily_scrape"


class ScraperScheduler:
    """Schedules the full scraping run on a crontab expression."""

    def __init__(
        self,
        service: Optional[ScraperService] = None,
        cron: Optional[str] = None,
        timezone: Optional[str] = None,
    ):
        """Initialize the scheduler.

        Args:
            service: Orchestrator used by the job
            cron: Crontab expression; ``SCHEDULE_CRON`` by default
            timezone: Timezone the expression is evaluated in
        """
        self.service = service or ScraperService()
        self.cron = cron or settings.SCHEDULE_CRON
        self.timezone = timezone or settings.SCHEDULE_TIMEZONE
        self.scheduler = AsyncIOScheduler(timezone=self.timezone)
        self.logger = logger.bind(service="scraper_scheduler")

    def start(self) -> Job:
        """Register the daily job and start the scheduler.

        Must be called from a running event loop.
        """
        job = self.scheduler.add_job(
            func=self._run_wrapper,
            trigger=CronTrigger.from_crontab(self.cron, timezone=self.timezone),
            id=JOB_ID,
            name="Scrape all stores",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        if not self.is_running():
            self.scheduler.start()
        self.logger.info(
            "scheduler_started",
            cron=self.cron,
            timezone=self.timezone,
            next_run=job.next_run_time.isoformat() if job.next_run_time else None,
        )
        return job

    def stop(self) -> None:
        if self.is_running():
            self.scheduler.shutdown(wait=False)
            self.logger.info("scheduler_stopped")

    async def run_once(self) -> RunSummary:
        self.logger.info("scheduled_run_started")
        summary = await self.service.run_all()
        self.logger.info("scheduled_run_complete", succeeded=len(summary.succeeded), failed=len(summary.failed))
        return summary

    async def _run_wrapper(self) -> None:
        """Job entry point; a failing run must not stop the scheduler."""
        try:
            await self.run_once()
        except Exception as e:
            self.logger.error("scheduled_run_failed", error=str(e), exc_info=True)

    def is_running(self) -> bool:
        return self.scheduler.running
