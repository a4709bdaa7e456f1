import asyncio
from datetime import date

import pytest
import requests

from services import holidays
from services.holidays import (
    PublicHoliday,
    fetch_public_holidays,
    get_fallback_holidays,
    is_public_holiday,
    normalize_items,
    parse_locdate,
)
from settings import get_settings


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def _api_payload(item):
    return {
        "response": {
            "header": {"resultCode": "00", "resultMsg": "NORMAL SERVICE."},
            "body": {"items": {"item": item}, "totalCount": 1},
        }
    }


@pytest.fixture()
def api_key(monkeypatch):
    monkeypatch.setattr(get_settings(), "HOLIDAY_API_KEY", "test-service-key")


def test_fallback_without_api_key_makes_no_request(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("network call without API key")

    monkeypatch.setattr(requests, "get", fail)

    result = asyncio.run(fetch_public_holidays(2025))

    assert result == get_fallback_holidays(2025)
    assert PublicHoliday(date(2025, 1, 1), "신정") in result


def test_fallback_is_deterministic():
    assert get_fallback_holidays(2025) == get_fallback_holidays(2025)


def test_fallback_includes_lunar_holidays_for_known_years():
    names_2025 = {h.name for h in get_fallback_holidays(2025)}
    assert {"설날", "추석", "부처님오신날"} <= names_2025
    assert PublicHoliday(date(2026, 2, 17), "설날") in get_fallback_holidays(2026)


def test_fallback_other_years_have_fixed_holidays_only():
    result = get_fallback_holidays(2030)

    assert len(result) == 8
    assert all(h.date.year == 2030 for h in result)
    assert PublicHoliday(date(2030, 12, 25), "크리스마스") in result


def test_parse_locdate_accepts_string_and_number():
    assert parse_locdate("20250115") == date(2025, 1, 15)
    assert parse_locdate(20251003) == date(2025, 10, 3)


@pytest.mark.parametrize("value", ["2025-01-15", "202501", "", None])
def test_parse_locdate_rejects_malformed(value):
    with pytest.raises(ValueError):
        parse_locdate(value)


def test_normalize_items_wraps_single_item():
    item = {"locdate": 20250301, "dateName": "삼일절", "isHoliday": "Y"}
    assert normalize_items(_api_payload(item)) == [item]


def test_normalize_items_handles_missing_and_empty_shapes():
    assert normalize_items(None) == []
    assert normalize_items({}) == []
    assert normalize_items({"response": {"body": {"items": ""}}}) == []
    assert normalize_items({"response": {"body": {"items": {}}}}) == []


def test_fetch_filters_non_holidays(monkeypatch, api_key):
    items = [
        {"locdate": 20250101, "dateName": "1월1일", "isHoliday": "Y"},
        {"locdate": 20250214, "dateName": "발렌타인데이", "isHoliday": "N"},
        {"locdate": "20250301", "dateName": "삼일절", "isHoliday": "Y"},
    ]
    monkeypatch.setattr(requests, "get", lambda *args, **kwargs: FakeResponse(_api_payload(items)))

    result = asyncio.run(fetch_public_holidays(2025))

    assert result == [
        PublicHoliday(date(2025, 1, 1), "1월1일"),
        PublicHoliday(date(2025, 3, 1), "삼일절"),
    ]


def test_fetch_single_item_response(monkeypatch, api_key):
    item = {"locdate": 20261225, "dateName": "기독탄신일", "isHoliday": "Y"}
    monkeypatch.setattr(requests, "get", lambda *args, **kwargs: FakeResponse(_api_payload(item)))

    result = asyncio.run(fetch_public_holidays(2026))

    assert result == [PublicHoliday(date(2026, 12, 25), "기독탄신일")]


def test_fetch_sends_expected_params(monkeypatch, api_key):
    captured = {}

    def fake_get(url, params=None, timeout=None):
        captured.update(url=url, params=params, timeout=timeout)
        return FakeResponse(_api_payload([]))

    monkeypatch.setattr(requests, "get", fake_get)

    asyncio.run(fetch_public_holidays(2025))

    assert captured["url"].endswith("/getRestDeInfo")
    assert captured["params"]["solYear"] == "2025"
    assert captured["params"]["_type"] == "json"
    assert captured["params"]["serviceKey"] == "test-service-key"
    assert captured["timeout"] == get_settings().HOLIDAY_API_TIMEOUT_SECONDS


@pytest.mark.parametrize(
    "behaviour",
    [
        requests.ConnectionError("connection refused"),
        requests.Timeout("read timed out"),
        FakeResponse({}, status_code=503),
        FakeResponse(ValueError("Expecting value")),
        FakeResponse({"response": {"header": {"resultCode": "30", "resultMsg": "SERVICE KEY IS NOT REGISTERED"}}}),
    ],
)
def test_fetch_failure_falls_back(monkeypatch, api_key, behaviour):
    def fake_get(*args, **kwargs):
        if isinstance(behaviour, Exception):
            raise behaviour
        return behaviour

    monkeypatch.setattr(requests, "get", fake_get)

    result = asyncio.run(fetch_public_holidays(2025))

    assert result == get_fallback_holidays(2025)


def test_fetch_caches_api_results(monkeypatch, api_key):
    calls = []

    def fake_get(*args, **kwargs):
        calls.append(1)
        return FakeResponse(_api_payload({"locdate": 20250101, "dateName": "1월1일", "isHoliday": "Y"}))

    monkeypatch.setattr(requests, "get", fake_get)

    asyncio.run(fetch_public_holidays(2025))
    asyncio.run(fetch_public_holidays(2025))

    assert len(calls) == 1


def test_placeholder_key_is_treated_as_missing(monkeypatch):
    monkeypatch.setattr(get_settings(), "HOLIDAY_API_KEY", "changeme")
    monkeypatch.setattr(requests, "get", lambda *a, **k: pytest.fail("unexpected request"))

    assert asyncio.run(fetch_public_holidays(2025)) == get_fallback_holidays(2025)


def test_is_public_holiday():
    assert asyncio.run(is_public_holiday(date(2025, 8, 15))) is True
    assert asyncio.run(is_public_holiday(date(2025, 8, 14))) is False


def test_resolve_api_key_decodes_url_encoded_key():
    assert holidays._resolve_api_key("abc%2Bdef%3D%3D") == "abc+def=="
    assert holidays._resolve_api_key(None) is None
    assert holidays._resolve_api_key("   ") is None
