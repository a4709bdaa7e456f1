import os

# Must be set before settings/database are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["HOLIDAY_API_KEY"] = ""
os.environ["HOLIDAY_SYNC_ENABLED"] = "false"
os.environ["CENTER_TIMEZONE"] = "Asia/Seoul"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base
from db_models import Center, CenterOperatingHour
from services.cache import cache


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def file_session_factory(tmp_path):
    """Sessions on a file-backed database, each with its own connection"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'centers.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def clear_holiday_cache():
    cache.clear()
    yield
    cache.clear()


def make_center(
    db,
    name="Center",
    is_active=True,
    closed_days=(0,),
    open_time="09:00",
    close_time="18:00",
    is_temp_closed=False,
    temp_closed_until=None,
):
    """Center with a full 7-day template; closed_days use 0=Sunday"""
    center = Center(
        name=name,
        is_active=is_active,
        is_temp_closed=is_temp_closed,
        temp_closed_until=temp_closed_until,
    )
    db.add(center)
    db.flush()
    for dow in range(7):
        is_open = dow not in closed_days
        db.add(CenterOperatingHour(
            center_id=center.id,
            day_of_week=dow,
            open_time=open_time if is_open else None,
            close_time=close_time if is_open else None,
            is_open=is_open,
        ))
    db.commit()
    db.refresh(center)
    return center
