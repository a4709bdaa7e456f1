"""
Background job scheduler for public holiday synchronization.
Uses APScheduler to sync holidays for the current and next year every January 1st.
"""
import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, List, NamedTuple, Optional
from zoneinfo import ZoneInfo

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from database import SessionLocal
from errors import SchedulingError
from services.holiday_sync import sync_public_holidays_to_database
from settings import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

HOLIDAY_SYNC_JOB_ID = "annual_holiday_sync"


class YearSyncResult(NamedTuple):
    """Outcome of syncing one year from the scheduled job"""
    year: int
    inserted: int = 0
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def log_sync_result(result: YearSyncResult) -> None:
    """Default reporter: one log line per synced year"""
    if result.ok:
        logger.info(f"Successfully synced {result.inserted} holidays for {result.year}")
    else:
        logger.error(f"Failed to sync holidays for {result.year}: {result.error}")


class HolidaySyncScheduler:
    """
    Owns the single annual holiday sync job of this process.

    The job handle lives on the instance, so tests can build isolated
    schedulers with fake session factories, sync callables and clocks.
    """

    def __init__(
        self,
        scheduler: Optional[AsyncIOScheduler] = None,
        session_factory: Callable[[], Session] = SessionLocal,
        sync: Callable[[Session, int], Awaitable[int]] = sync_public_holidays_to_database,
        timezone: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
        reporter: Callable[[YearSyncResult], None] = log_sync_result,
    ):
        self.scheduler = scheduler or AsyncIOScheduler()
        self.session_factory = session_factory
        self.sync = sync
        self.timezone = timezone or settings.HOLIDAY_SYNC_TIMEZONE
        self.clock = clock or (lambda: datetime.now(ZoneInfo(self.timezone)))
        self.reporter = reporter
        self._job: Optional[Job] = None

    @property
    def job(self) -> Optional[Job]:
        return self._job

    def setup_holiday_sync_cron(self) -> Job:
        """
        Register the yearly sync job (00:00 on January 1st).

        Calling again while the job is registered returns the existing job.

        Raises:
            SchedulingError: the trigger or job could not be registered
        """
        if self._job is not None:
            logger.info("Holiday sync job already scheduled")
            return self._job

        try:
            self._job = self.scheduler.add_job(
                self.run_annual_sync,
                trigger=CronTrigger(month=1, day=1, hour=0, minute=0, timezone=self.timezone),
                id=HOLIDAY_SYNC_JOB_ID,
                name="Annual Holiday Sync",
                replace_existing=True
            )
        except Exception as e:
            raise SchedulingError(f"Failed to schedule holiday sync job: {e}") from e

        logger.info(f"Holiday sync job scheduled: January 1st 00:00 ({self.timezone})")
        return self._job

    def stop_holiday_sync_cron(self) -> bool:
        """Cancel the yearly job. Returns False when nothing was scheduled."""
        if self._job is None:
            logger.info("No holiday sync job to stop")
            return False

        try:
            self.scheduler.remove_job(HOLIDAY_SYNC_JOB_ID)
        except JobLookupError:
            logger.warning("Holiday sync job was already removed from the scheduler")
        self._job = None
        logger.info("Holiday sync job stopped")
        return True

    async def _sync_year(self, year: int) -> int:
        db = self.session_factory()
        try:
            return await self.sync(db, year)
        finally:
            db.close()

    async def run_annual_sync(self) -> List[YearSyncResult]:
        """
        Scheduled job: sync the current and next year independently.

        A failure for one year does not affect the other, and no error
        escapes this method.
        """
        started = datetime.utcnow()
        current_year = self.clock().year
        years = [current_year, current_year + 1]
        logger.info(f"Starting annual holiday synchronization for {years[0]} and {years[1]}")

        outcomes = await asyncio.gather(
            *(self._sync_year(year) for year in years),
            return_exceptions=True
        )

        results = []
        for year, outcome in zip(years, outcomes):
            if isinstance(outcome, BaseException):
                result = YearSyncResult(year=year, error=outcome)
            else:
                result = YearSyncResult(year=year, inserted=outcome)
            try:
                self.reporter(result)
            except Exception as e:
                logger.error(f"Holiday sync reporter failed for {year}: {e}")
            results.append(result)

        elapsed = (datetime.utcnow() - started).total_seconds()
        logger.info(f"Holiday synchronization completed in {elapsed:.2f}s")
        return results

    async def sync_holidays_manually(self, year: Optional[int] = None) -> int:
        """Sync one year now (default: current year). Errors propagate."""
        target_year = year or self.clock().year
        logger.info(f"Starting manual holiday synchronization for {target_year}")

        try:
            count = await self._sync_year(target_year)
        except Exception as e:
            logger.error(f"Manual holiday sync failed for {target_year}: {e}")
            raise

        logger.info(f"Manual sync inserted {count} holidays for {target_year}")
        return count

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self):
        if not self.scheduler.running:
            self.scheduler.start()

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)


holiday_scheduler = HolidaySyncScheduler()


def start_scheduler():
    """Register the holiday sync job and start the background scheduler."""
    if not settings.HOLIDAY_SYNC_ENABLED:
        logger.info("Scheduled holiday sync is disabled (HOLIDAY_SYNC_ENABLED=false)")
        return

    holiday_scheduler.setup_holiday_sync_cron()
    holiday_scheduler.start()
    logger.info("Scheduler started")


def shutdown_scheduler():
    """Gracefully shutdown the scheduler."""
    if holiday_scheduler.running:
        holiday_scheduler.stop_holiday_sync_cron()
        holiday_scheduler.shutdown()
        logger.info("Scheduler shutdown complete")
