"""
Periodic refresh scheduling.

Wraps an APScheduler BackgroundScheduler. Every job is registered with
max_instances=1 and coalesce=True: a refresh never starts while the
previous one is still writing, and ticks missed during a slow run collapse
into a single catch-up run.
"""

from typing import Any, Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from polyarb.core.config import Settings, get_settings
from polyarb.core.logging import get_logger

logger = get_logger("scheduler")

JOB_DEFAULTS = {"max_instances": 1, "coalesce": True}
DEFAULT_INTERVAL_SECONDS = 60


class SchedulerService:
    """Schedules the refresh job by fixed interval or cron expression."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        config: Optional[dict] = None,
    ):
        self.settings = settings or get_settings()
        self.config = config or {}
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def scheduler(self) -> BackgroundScheduler:
        if self._scheduler is None:
            self._scheduler = BackgroundScheduler(timezone=self.settings.timezone)
        return self._scheduler

    def _schedule(self, name: str, func: Callable, trigger: BaseTrigger) -> str:
        job = self.scheduler.add_job(
            func,
            trigger=trigger,
            id=name,
            name=name,
            replace_existing=True,
            **JOB_DEFAULTS,
        )
        logger.info(f"Scheduled {name}: {trigger}")
        return job.id

    def add_job(self, name: str, func: Callable, cron: str) -> str:
        """
        Schedule `func` with a five-field cron expression (e.g. "*/5 * * * *").

        Raises:
            ValueError: If the expression is not valid crontab syntax
        """
        if len(cron.split()) != 5:
            raise ValueError(f"Invalid cron expression: {cron!r}")
        trigger = CronTrigger.from_crontab(cron, timezone=self.settings.timezone)
        return self._schedule(name, func, trigger)

    def add_interval_job(self, name: str, func: Callable, seconds: int) -> str:
        """
        Schedule `func` every `seconds` seconds.

        Raises:
            ValueError: If seconds < 1
        """
        if seconds < 1:
            raise ValueError(f"Interval must be at least 1 second, got {seconds}")
        trigger = IntervalTrigger(seconds=seconds, timezone=self.settings.timezone)
        return self._schedule(name, func, trigger)

    def remove_job(self, name: str) -> bool:
        """Remove a job by name. Returns False if it was not scheduled."""
        if self.scheduler.get_job(name) is None:
            return False
        self.scheduler.remove_job(name)
        logger.info(f"Removed job: {name}")
        return True

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Scheduler started")

    def stop(self) -> None:
        """Shut down, waiting for a running refresh to finish its writes."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)
            logger.info("Scheduler stopped")

    def get_jobs(self) -> list[dict[str, Any]]:
        jobs = []
        for job in self.scheduler.get_jobs():
            # Jobs added before start() have no next_run_time yet
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": next_run.isoformat() if next_run else None,
            })
        return jobs

    def setup_from_config(self, run_func: Callable) -> None:
        """
        Register the refresh job from the `scheduler.refresh` config block.

        `cron` wins over `interval_seconds` when both are set.
        """
        refresh = (self.config.get("scheduler") or {}).get("refresh") or {}

        if not refresh.get("enabled", True):
            logger.warning("Refresh job disabled in config")
            return

        if refresh.get("cron"):
            self.add_job("refresh", run_func, refresh["cron"])
        else:
            seconds = int(refresh.get("interval_seconds", DEFAULT_INTERVAL_SECONDS))
            self.add_interval_job("refresh", run_func, seconds)


def create_scheduler_service(
    settings: Optional[Settings] = None,
    config: Optional[dict] = None,
) -> SchedulerService:
    return SchedulerService(settings=settings, config=config)
