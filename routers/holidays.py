# routers/holidays.py - Manual holiday synchronization endpoints
import logging
from datetime import date, datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from database import get_db
from db_models import Center
from errors import PersistenceError
from schemas import HolidaySyncResponse, RegularHolidayResponse
from services.holiday_sync import HolidaySyncService
from services.regular_holidays import generate_regular_holidays, generate_regular_holidays_for_all_centers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/holidays", tags=["Holidays"])


def parse_month(value: str) -> date:
    """Parse "YYYY-MM" into the first day of that month"""
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="month must be in YYYY-MM format"
        )


@router.post("/sync", response_model=HolidaySyncResponse)
async def sync_holidays(
    year: Optional[int] = Query(None, ge=2000, le=2100, description="Year to sync (default: current year)"),
    db: Session = Depends(get_db)
):
    """Manually sync public holidays for a year to all active centers"""
    target_year = year or date.today().year

    try:
        inserted = await HolidaySyncService(db).sync_public_holidays(target_year)
    except PersistenceError as e:
        logger.error(f"Manual holiday sync failed for {target_year}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Holiday sync failed for {target_year}"
        )

    return HolidaySyncResponse(year=target_year, inserted=inserted)


@router.post("/regular", response_model=RegularHolidayResponse)
async def generate_regular(
    month: str = Query(..., description="Target month in YYYY-MM format"),
    center_id: Optional[int] = Query(None, description="Single center (default: all active centers)"),
    db: Session = Depends(get_db)
):
    """Materialize weekly closed days as holiday records for a month"""
    target_month = parse_month(month)

    if center_id is not None:
        center = db.query(Center).filter(Center.id == center_id).first()
        if not center:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Center with ID {center_id} not found"
            )

    try:
        if center_id is not None:
            generated = generate_regular_holidays(db, center_id, target_month)
        else:
            generated = generate_regular_holidays_for_all_centers(db, target_month)
    except PersistenceError as e:
        logger.error(f"Regular holiday generation failed for {month}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Regular holiday generation failed for {month}"
        )

    return RegularHolidayResponse(month=month, generated=generated, center_id=center_id)
