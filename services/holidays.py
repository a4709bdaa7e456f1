"""
Public holiday source.

Fetches a year's public holidays from the data.go.kr special day information
service (SpcdeInfoService/getRestDeInfo). Whenever the service key is missing or
the request fails for any reason, the static fallback table below is returned
instead, so callers never see an exception from this module.
"""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Dict, List, NamedTuple, Optional
from urllib.parse import unquote

import requests

from settings import get_settings
from .cache import cache

logger = logging.getLogger(__name__)

# Thread pool for running sync requests without blocking
_executor = ThreadPoolExecutor(max_workers=2)

PLACEHOLDER_API_KEYS = {"", "your-api-key", "your_api_key", "changeme", "change-me"}


class PublicHoliday(NamedTuple):
    date: date
    name: str


# Same date every year
FIXED_HOLIDAYS = [
    (1, 1, "신정"),
    (3, 1, "삼일절"),
    (5, 5, "어린이날"),
    (6, 6, "현충일"),
    (8, 15, "광복절"),
    (10, 3, "개천절"),
    (10, 9, "한글날"),
    (12, 25, "크리스마스"),
]

# Lunar calendar holidays, only known for these years
LUNAR_HOLIDAYS = {
    2025: [
        (1, 28, "설날 전날"),
        (1, 29, "설날"),
        (1, 30, "설날 다음날"),
        (5, 5, "부처님오신날"),
        (10, 5, "추석 전날"),
        (10, 6, "추석"),
        (10, 7, "추석 다음날"),
    ],
    2026: [
        (2, 16, "설날 전날"),
        (2, 17, "설날"),
        (2, 18, "설날 다음날"),
        (5, 24, "부처님오신날"),
        (9, 24, "추석 전날"),
        (9, 25, "추석"),
        (9, 26, "추석 다음날"),
    ],
}


def get_fallback_holidays(year: int) -> List[PublicHoliday]:
    """Hardcoded holidays used when the API is unavailable or unconfigured."""
    holidays = [PublicHoliday(date(year, month, day), name) for month, day, name in FIXED_HOLIDAYS]

    lunar = LUNAR_HOLIDAYS.get(year)
    if lunar is None:
        logger.warning(
            f"No lunar holiday data for {year}; fallback calendar contains fixed-date holidays only. "
            f"Configure HOLIDAY_API_KEY for a complete calendar."
        )
        return holidays

    holidays.extend(PublicHoliday(date(year, month, day), name) for month, day, name in lunar)
    return holidays


def parse_locdate(value: Any) -> date:
    """Parse a YYYYMMDD locdate ("20250115" or 20250115) into a date."""
    text = str(value).strip()
    if len(text) != 8 or not text.isdigit():
        raise ValueError(f"Invalid locdate: {value!r}")
    return date(int(text[0:4]), int(text[4:6]), int(text[6:8]))


def normalize_items(payload: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Extract response.body.items.item as a list.

    The API returns a single holiday as a bare object instead of a one-element
    list, and an empty string for `items` when nothing matched.
    """
    if not isinstance(payload, dict):
        return []

    body = (payload.get("response") or {}).get("body") or {}
    items = body.get("items")
    if not isinstance(items, dict):
        return []

    item = items.get("item")
    if item is None:
        return []
    if isinstance(item, dict):
        return [item]
    if isinstance(item, list):
        return [i for i in item if isinstance(i, dict)]
    return []


def _resolve_api_key(raw_key: Optional[str]) -> Optional[str]:
    if raw_key is None or raw_key.strip().lower() in PLACEHOLDER_API_KEYS:
        return None
    # Keys are issued URL-encoded; requests encodes them again
    return unquote(raw_key.strip())


def _request_holidays(url: str, params: dict, timeout: float) -> dict:
    """Synchronous holidays fetch (runs in thread pool)"""
    response = requests.get(url, params=params, timeout=timeout)
    response.raise_for_status()
    data = response.json()

    header = ((data or {}).get("response") or {}).get("header") or {}
    result_code = header.get("resultCode")
    if result_code and result_code != "00":
        raise ValueError(f"Holiday API error {result_code}: {header.get('resultMsg', 'Unknown error')}")
    return data


async def fetch_public_holidays(year: int) -> List[PublicHoliday]:
    """Fetch public holidays for a year (API results cached for 24 hours)"""
    settings = get_settings()

    api_key = _resolve_api_key(settings.HOLIDAY_API_KEY)
    if not api_key:
        logger.warning("HOLIDAY_API_KEY not configured, using fallback holidays")
        return get_fallback_holidays(year)

    cache_key = f"holidays:{year}"
    cached = cache.get(cache_key)
    if cached is not None:
        return list(cached)

    url = f"{settings.HOLIDAY_API_URL}/getRestDeInfo"
    params = {
        "serviceKey": api_key,
        "solYear": str(year),
        "numOfRows": 100,
        "_type": "json",
    }

    loop = asyncio.get_running_loop()
    try:
        data = await loop.run_in_executor(
            _executor, _request_holidays, url, params, settings.HOLIDAY_API_TIMEOUT_SECONDS
        )
        items = normalize_items(data)
        if not items:
            logger.warning(f"No items in holiday API response for {year}, using fallback holidays")
            return get_fallback_holidays(year)

        holidays = [
            PublicHoliday(parse_locdate(item["locdate"]), item.get("dateName", ""))
            for item in items
            if item.get("isHoliday") == "Y"
        ]
    except Exception as e:
        logger.error(f"Holiday API fetch failed for {year}: {e}")
        logger.warning("Falling back to hardcoded holidays")
        return get_fallback_holidays(year)

    logger.info(f"Fetched {len(holidays)} holidays for year {year}")
    cache.set(cache_key, holidays, ttl_seconds=settings.HOLIDAY_CACHE_TTL_SECONDS)
    return holidays


async def is_public_holiday(day: date) -> bool:
    """Check whether a date is a public holiday"""
    holidays = await fetch_public_holidays(day.year)
    return any(holiday.date == day for holiday in holidays)
