"""Public holiday synchronization into per-center holiday records"""
import logging
from typing import Awaitable, Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db_models import Center
from errors import PersistenceError
from .holiday_store import insert_holidays_skip_duplicates
from .holidays import PublicHoliday, fetch_public_holidays

logger = logging.getLogger(__name__)

HolidayFetcher = Callable[[int], Awaitable[List[PublicHoliday]]]


class HolidaySyncService:
    """Copies a year's public holidays onto every active center"""

    def __init__(self, db: Session, fetcher: Optional[HolidayFetcher] = None):
        self.db = db
        self.fetcher = fetcher or fetch_public_holidays

    def _active_center_ids(self) -> List[int]:
        try:
            rows = self.db.query(Center.id).filter(Center.is_active.is_(True)).all()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to load active centers", original=e) from e
        return [row.id for row in rows]

    async def sync_public_holidays(self, year: int) -> int:
        """
        Sync public holidays for a year to all active centers.

        Safe to repeat: rows that already exist are skipped, so a second call
        for the same year inserts nothing.

        Returns:
            Number of newly inserted holiday rows
        """
        logger.info(f"Starting public holiday sync for year {year}")

        holidays = await self.fetcher(year)
        if not holidays:
            logger.warning(f"No holidays to sync for year {year}")
            return 0

        center_ids = self._active_center_ids()
        if not center_ids:
            logger.warning("No active centers found")
            return 0

        records = [
            {
                "center_id": center_id,
                "holiday_date": holiday.date,
                "holiday_name": holiday.name,
                "is_regular": False,
            }
            for center_id in center_ids
            for holiday in holidays
        ]

        inserted = insert_holidays_skip_duplicates(self.db, records)

        logger.info(
            f"Synced {len(holidays)} holidays to {len(center_ids)} centers "
            f"({inserted} records created) for year {year}"
        )
        return inserted


async def sync_public_holidays_to_database(db: Session, year: int) -> int:
    """Sync a year's public holidays using the default holiday source"""
    return await HolidaySyncService(db).sync_public_holidays(year)
