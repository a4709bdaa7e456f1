"""
Center operating status.

Status priority (first match wins):
    1. TEMP_CLOSED  - administrative temporary closure (임시휴무)
    2. HOLIDAY      - a holiday row exists for today (public or regular)
    3. CLOSED       - today's weekday is closed in the weekly template
    4. CLOSING_SOON - open, within the threshold before closing
    5. OPEN         - open
    6. CLOSED       - before opening or after closing

`evaluate_operating_status` is a pure function over already-loaded rows;
`get_center_operating_status` loads those rows for one center.

Hours are a same-day window [open_time, close_time); "24:00" closes at
midnight. Ranges that run past midnight (close <= open) are not supported.
"""
import logging
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from db_models import Center, CenterHoliday, CenterOperatingHour
from settings import get_settings
from .regular_holidays import day_of_week, get_day_name

logger = logging.getLogger(__name__)

DEFAULT_CLOSING_SOON_MINUTES = 30
DEFAULT_SCAN_DAYS = 14
UPCOMING_HOLIDAY_LIMIT = 5
END_OF_DAY_SECONDS = 24 * 3600


class OperatingStatus(str, Enum):
    OPEN = "OPEN"
    CLOSING_SOON = "CLOSING_SOON"
    CLOSED = "CLOSED"
    HOLIDAY = "HOLIDAY"
    TEMP_CLOSED = "TEMP_CLOSED"


STATUS_COLORS = {
    OperatingStatus.OPEN: "green",
    OperatingStatus.CLOSING_SOON: "yellow",
    OperatingStatus.CLOSED: "gray",
    OperatingStatus.HOLIDAY: "red",
    OperatingStatus.TEMP_CLOSED: "red",
}


class TemporaryClosure(NamedTuple):
    resume_date: Optional[date] = None


class OperatingStatusResult(NamedTuple):
    status: OperatingStatus
    closing_time: Optional[str] = None
    next_open_date: Optional[date] = None
    message: str = ""

    def to_dict(self) -> Dict[str, str]:
        """Status query payload: status, plus closingTime / nextOpenDate when known"""
        payload = {"status": self.status.value}
        if self.closing_time:
            payload["closingTime"] = self.closing_time
        if self.next_open_date:
            payload["nextOpenDate"] = self.next_open_date.isoformat()
        return payload


def parse_hhmm(value: Any) -> Optional[time]:
    """Parse "HH:MM" (or "HH:MM:SS") into a time; None when missing or malformed"""
    if value is None:
        return None
    if isinstance(value, time):
        return value
    try:
        parts = [int(p) for p in str(value).strip().split(":")]
        if len(parts) not in (2, 3):
            return None
        return time(*parts)
    except (TypeError, ValueError):
        return None


def _seconds(t: time) -> int:
    return t.hour * 3600 + t.minute * 60 + t.second


def parse_close_seconds(value: Any) -> Optional[int]:
    """Seconds after midnight for a closing time; "24:00" closes at the end of the day"""
    if value is not None and str(value).strip() in ("24:00", "24:00:00"):
        return END_OF_DAY_SECONDS
    close_time = parse_hhmm(value)
    return _seconds(close_time) if close_time is not None else None


def _format_seconds(seconds: int) -> str:
    return f"{seconds // 3600:02d}:{seconds % 3600 // 60:02d}"


def _hours_by_day(hours: Iterable[Any]) -> Dict[int, Any]:
    return {row.day_of_week: row for row in hours}


def find_next_open_date(
    today: date,
    hours: Iterable[Any],
    holiday_dates: Mapping[date, str],
    scan_days: int = DEFAULT_SCAN_DAYS,
) -> Optional[date]:
    """First day after today that is open in the weekly template and has no holiday row"""
    by_day = hours if isinstance(hours, dict) else _hours_by_day(hours)

    for offset in range(1, scan_days + 1):
        candidate = today + timedelta(days=offset)
        row = by_day.get(day_of_week(candidate))
        if row is not None and row.is_open and candidate not in holiday_dates:
            return candidate
    return None


def evaluate_operating_status(
    hours: Iterable[Any],
    holiday_dates: Mapping[date, str],
    now: datetime,
    temp_closure: Optional[TemporaryClosure] = None,
    closing_soon_minutes: int = DEFAULT_CLOSING_SOON_MINUTES,
    scan_days: int = DEFAULT_SCAN_DAYS,
) -> OperatingStatusResult:
    """
    Compute a center's status at `now` (center-local wall clock).

    Args:
        hours: weekly operating-hour rows (day_of_week, open_time, close_time, is_open)
        holiday_dates: holiday date -> name, covering today through the scan horizon
        now: evaluation instant in the center's local time
        temp_closure: set when an administrative temporary closure is active
        closing_soon_minutes: CLOSING_SOON window before close_time
        scan_days: how far ahead to look for the next open day
    """
    by_day = _hours_by_day(hours)
    today = now.date()

    def next_open() -> Optional[date]:
        return find_next_open_date(today, by_day, holiday_dates, scan_days)

    if temp_closure is not None:
        return OperatingStatusResult(
            status=OperatingStatus.TEMP_CLOSED,
            next_open_date=temp_closure.resume_date,
            message="임시휴무",
        )

    if today in holiday_dates:
        return OperatingStatusResult(
            status=OperatingStatus.HOLIDAY,
            next_open_date=next_open(),
            message=f"휴무 ({holiday_dates[today]})",
        )

    today_hours = by_day.get(day_of_week(today))
    if today_hours is None or not today_hours.is_open:
        return OperatingStatusResult(
            status=OperatingStatus.CLOSED,
            next_open_date=next_open(),
            message="정기휴무" if today_hours is not None else "운영시간 정보 없음",
        )

    open_time = parse_hhmm(today_hours.open_time)
    close_seconds = parse_close_seconds(today_hours.close_time)
    if open_time is None or close_seconds is None:
        # Open day without usable hours is never reported as open
        return OperatingStatusResult(
            status=OperatingStatus.CLOSED,
            next_open_date=next_open(),
            message="운영시간 정보 없음",
        )

    now_seconds = _seconds(now.time())
    closing = _format_seconds(close_seconds)

    if now_seconds < _seconds(open_time):
        return OperatingStatusResult(
            status=OperatingStatus.CLOSED,
            next_open_date=today,
            message=f"마감 (오늘 {open_time.strftime('%H:%M')} 오픈)",
        )

    if now_seconds >= close_seconds:
        next_date = next_open()
        if next_date is None:
            message = "마감"
        else:
            next_row = by_day[day_of_week(next_date)]
            next_open_time = parse_hhmm(next_row.open_time)
            opening = f" {next_open_time.strftime('%H:%M')}" if next_open_time else ""
            message = f"마감 ({get_day_name(day_of_week(next_date))}{opening} 오픈)"
        return OperatingStatusResult(
            status=OperatingStatus.CLOSED,
            next_open_date=next_date,
            message=message,
        )

    if close_seconds - now_seconds <= closing_soon_minutes * 60:
        return OperatingStatusResult(
            status=OperatingStatus.CLOSING_SOON,
            closing_time=closing,
            message=f"곧 마감 (~{closing})",
        )

    return OperatingStatusResult(
        status=OperatingStatus.OPEN,
        closing_time=closing,
        message=f"운영 중 (~{closing})",
    )


def temporary_closure_for(center: Center, today: date) -> Optional[TemporaryClosure]:
    """Active administrative closure for a center, None once the resume date is reached"""
    if not center.is_temp_closed:
        return None
    if center.temp_closed_until is not None and center.temp_closed_until <= today:
        return None
    return TemporaryClosure(resume_date=center.temp_closed_until)


def to_center_local(at: Optional[datetime] = None, timezone: Optional[str] = None) -> datetime:
    """Convert an instant to center-local wall-clock time (naive input is taken as local)"""
    tz = ZoneInfo(timezone or get_settings().CENTER_TIMEZONE)
    if at is None:
        return datetime.now(tz)
    if at.tzinfo is None:
        return at.replace(tzinfo=tz)
    return at.astimezone(tz)


def get_center_holidays(
    db: Session,
    center_id: int,
    start_date: date,
    end_date: Optional[date] = None,
) -> List[CenterHoliday]:
    """Holiday rows for a center within [start_date, end_date] (default 14 days)"""
    end = end_date or start_date + timedelta(days=DEFAULT_SCAN_DAYS)
    return db.query(CenterHoliday).filter(
        CenterHoliday.center_id == center_id,
        CenterHoliday.holiday_date >= start_date,
        CenterHoliday.holiday_date <= end
    ).order_by(CenterHoliday.holiday_date.asc()).all()


def get_center_operating_status(
    db: Session,
    center_id: int,
    at: Optional[datetime] = None,
) -> Optional[Dict[str, Any]]:
    """
    Load a center's hours and holidays and evaluate its status.

    Returns:
        Dict with the status payload, message, color, weekly hours and
        upcoming holidays; None if the center does not exist
    """
    settings = get_settings()

    center = db.query(Center).filter(Center.id == center_id).first()
    if not center:
        return None

    now = to_center_local(at, settings.CENTER_TIMEZONE)
    today = now.date()

    hours = db.query(CenterOperatingHour).filter(
        CenterOperatingHour.center_id == center_id
    ).order_by(CenterOperatingHour.day_of_week).all()

    holidays = get_center_holidays(
        db, center_id, today, today + timedelta(days=settings.NEXT_OPEN_SCAN_DAYS)
    )
    holiday_dates = {h.holiday_date: h.holiday_name for h in holidays}

    result = evaluate_operating_status(
        hours,
        holiday_dates,
        now,
        temp_closure=temporary_closure_for(center, today),
        closing_soon_minutes=settings.CLOSING_SOON_THRESHOLD_MINUTES,
        scan_days=settings.NEXT_OPEN_SCAN_DAYS,
    )

    logger.debug(f"Center {center_id} status at {now.isoformat()}: {result.status.value}")

    payload = result.to_dict()
    payload.update({
        "message": result.message,
        "statusColor": STATUS_COLORS[result.status],
        "weeklyHours": [
            {
                "dayOfWeek": h.day_of_week,
                "dayName": get_day_name(h.day_of_week),
                "openTime": h.open_time,
                "closeTime": h.close_time,
                "isOpen": h.is_open,
            }
            for h in hours
        ],
        "upcomingHolidays": [
            {
                "holidayDate": h.holiday_date.isoformat(),
                "holidayName": h.holiday_name,
                "isRegular": h.is_regular,
            }
            for h in holidays[:UPCOMING_HOLIDAY_LIMIT]
        ],
    })
    return payload
