# routers/centers.py - Center operating status and holiday endpoints
from typing import List, Optional
from datetime import datetime, date, timedelta
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from database import get_db
from db_models import Center
from schemas import OperatingStatusResponse, HolidayResponse
from services.operating_status import get_center_operating_status, get_center_holidays, to_center_local

router = APIRouter(prefix="/centers", tags=["Centers"])

MAX_HOLIDAY_RANGE_DAYS = 366


@router.get("/{center_id}/operating-status", response_model=OperatingStatusResponse)
async def get_operating_status(
    center_id: int,
    at: Optional[datetime] = Query(None, description="Evaluation instant (ISO 8601), defaults to now"),
    db: Session = Depends(get_db)
):
    """Get the live operating status of a center"""
    if center_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Center ID must be a positive integer"
        )

    result = get_center_operating_status(db, center_id, at)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Center with ID {center_id} not found"
        )

    return result


@router.get("/{center_id}/holidays", response_model=List[HolidayResponse])
async def list_center_holidays(
    center_id: int,
    start: Optional[date] = Query(None, description="First date (default: today)"),
    end: Optional[date] = Query(None, description="Last date (default: start + 14 days)"),
    db: Session = Depends(get_db)
):
    """List holiday records for a center within a date range"""
    center = db.query(Center).filter(Center.id == center_id).first()
    if not center:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Center with ID {center_id} not found"
        )

    start_date = start or to_center_local().date()
    if end is not None:
        if end < start_date:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="end must not be before start"
            )
        if end - start_date > timedelta(days=MAX_HOLIDAY_RANGE_DAYS):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Date range must not exceed {MAX_HOLIDAY_RANGE_DAYS} days"
            )

    return get_center_holidays(db, center_id, start_date, end)
