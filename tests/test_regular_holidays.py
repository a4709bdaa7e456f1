from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest
from sqlalchemy import text

from conftest import make_center
from db_models import CenterHoliday
from errors import PersistenceError
from services.regular_holidays import (
    day_of_week,
    days_in_month,
    generate_regular_holidays,
    generate_regular_holidays_for_all_centers,
    get_day_name,
)


def test_day_of_week_is_sunday_based():
    assert day_of_week(date(2025, 1, 5)) == 0  # Sunday
    assert day_of_week(date(2025, 1, 6)) == 1  # Monday
    assert day_of_week(date(2025, 1, 11)) == 6  # Saturday
    assert get_day_name(0) == "일요일"
    assert get_day_name(7) == ""


def test_days_in_month_handles_leap_year():
    assert len(days_in_month(date(2024, 2, 10))) == 29
    assert len(days_in_month(date(2025, 2, 1))) == 28


def test_sunday_closure_for_january_2025(db):
    center = make_center(db, closed_days=(0,))

    count = generate_regular_holidays(db, center.id, date(2025, 1, 1))

    rows = db.query(CenterHoliday).order_by(CenterHoliday.holiday_date).all()
    assert count == 4
    assert [r.holiday_date.day for r in rows] == [5, 12, 19, 26]
    assert all(r.is_regular and r.holiday_name == "일요일" for r in rows)


def test_month_argument_may_be_any_day_in_month(db):
    center = make_center(db, closed_days=(0, 6))

    assert generate_regular_holidays(db, center.id, date(2025, 3, 17)) == 10


def test_center_without_closed_days_yields_nothing(db):
    center = make_center(db, closed_days=())

    assert generate_regular_holidays(db, center.id, date(2025, 1, 1)) == 0
    assert db.query(CenterHoliday).count() == 0


def test_generation_is_idempotent(db):
    center = make_center(db, closed_days=(1,))

    first = generate_regular_holidays(db, center.id, date(2025, 9, 1))
    second = generate_regular_holidays(db, center.id, date(2025, 9, 1))

    assert first == 5  # Mondays: 1, 8, 15, 22, 29
    assert second == 0


def test_all_centers_sums_active_centers(db):
    make_center(db, "Sunday", closed_days=(0,))
    make_center(db, "Weekend", closed_days=(0, 6))
    make_center(db, "Inactive", closed_days=(0,), is_active=False)

    total = generate_regular_holidays_for_all_centers(db, date(2025, 1, 1))

    # 4 Sundays + (4 Sundays + 4 Saturdays)
    assert total == 12


def test_generation_propagates_persistence_errors(db):
    center = make_center(db, closed_days=(0,))
    db.execute(text("DROP TABLE center_holidays"))
    db.commit()

    with pytest.raises(PersistenceError):
        generate_regular_holidays(db, center.id, date(2025, 1, 1))


def test_concurrent_generation_for_same_center_inserts_each_day_once(file_session_factory):
    setup = file_session_factory()
    center_id = make_center(setup, closed_days=(0,)).id
    setup.close()

    def generate():
        session = file_session_factory()
        try:
            return generate_regular_holidays(session, center_id, date(2025, 1, 1))
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=2) as executor:
        results = list(executor.map(lambda _: generate(), range(2)))

    check = file_session_factory()
    assert sum(results) == 4
    assert check.query(CenterHoliday).count() == 4
    check.close()
