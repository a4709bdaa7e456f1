# services/regular_holidays.py - Materialize weekly closed days as dated holidays
import calendar
import logging
from datetime import date
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db_models import Center, CenterOperatingHour
from errors import PersistenceError
from .holiday_store import insert_holidays_skip_duplicates

logger = logging.getLogger(__name__)

# Indexed by day_of_week (0=Sunday)
DAY_NAMES = ["일요일", "월요일", "화요일", "수요일", "목요일", "금요일", "토요일"]


def day_of_week(day: date) -> int:
    """Sunday-based weekday index (0=Sunday ... 6=Saturday)"""
    return (day.weekday() + 1) % 7


def get_day_name(dow: int) -> str:
    if 0 <= dow < len(DAY_NAMES):
        return DAY_NAMES[dow]
    return ""


def days_in_month(month: date) -> List[date]:
    last_day = calendar.monthrange(month.year, month.month)[1]
    return [date(month.year, month.month, d) for d in range(1, last_day + 1)]


def generate_regular_holidays(db: Session, center_id: int, month: date) -> int:
    """
    Generate regular weekly holidays for a center for the month containing `month`.

    Returns:
        Number of holiday rows created
    """
    logger.info(f"Generating regular holidays for center {center_id}, month {month:%Y-%m}")

    try:
        closed_rows = db.query(CenterOperatingHour.day_of_week).filter(
            CenterOperatingHour.center_id == center_id,
            CenterOperatingHour.is_open.is_(False)
        ).all()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to load operating hours for center {center_id}", original=e) from e

    closed_days = {row.day_of_week for row in closed_rows}
    if not closed_days:
        logger.info(f"No closed days found for center {center_id}")
        return 0

    records = [
        {
            "center_id": center_id,
            "holiday_date": day,
            "holiday_name": get_day_name(day_of_week(day)),
            "is_regular": True,
        }
        for day in days_in_month(month)
        if day_of_week(day) in closed_days
    ]

    count = insert_holidays_skip_duplicates(db, records)
    logger.info(f"Generated {count} regular holidays for center {center_id}")
    return count


def generate_regular_holidays_for_all_centers(db: Session, month: date) -> int:
    """Generate regular holidays for every active center, one center at a time"""
    logger.info(f"Generating regular holidays for all centers, month {month:%Y-%m}")

    try:
        center_ids = [row.id for row in db.query(Center.id).filter(Center.is_active.is_(True)).all()]
    except SQLAlchemyError as e:
        raise PersistenceError("Failed to load active centers", original=e) from e

    total = 0
    for center_id in center_ids:
        total += generate_regular_holidays(db, center_id, month)

    logger.info(f"Total regular holidays generated: {total}")
    return total
