# schemas.py
from pydantic import BaseModel
from typing import Optional, List
from datetime import date


class OperatingHourResponse(BaseModel):
    dayOfWeek: int
    dayName: str
    openTime: Optional[str] = None
    closeTime: Optional[str] = None
    isOpen: bool


class UpcomingHolidayResponse(BaseModel):
    holidayDate: str
    holidayName: str
    isRegular: bool


class OperatingStatusResponse(BaseModel):
    status: str  # OPEN, CLOSING_SOON, CLOSED, HOLIDAY, TEMP_CLOSED
    closingTime: Optional[str] = None  # "HH:MM"
    nextOpenDate: Optional[str] = None  # "YYYY-MM-DD"
    message: str
    statusColor: str
    weeklyHours: List[OperatingHourResponse] = []
    upcomingHolidays: List[UpcomingHolidayResponse] = []


class HolidayResponse(BaseModel):
    id: int
    center_id: int
    holiday_date: date
    holiday_name: str
    is_regular: bool

    class Config:
        from_attributes = True


class HolidaySyncResponse(BaseModel):
    year: int
    inserted: int


class RegularHolidayResponse(BaseModel):
    month: str  # "YYYY-MM"
    generated: int
    center_id: Optional[int] = None


class HealthResponse(BaseModel):
    status: str
    scheduler_running: bool
    holiday_sync_job: Optional[str] = None
    next_holiday_sync: Optional[str] = None
