"""Bulk writes of center holiday rows with duplicate skipping"""
import logging
from typing import Dict, List, Any

from sqlalchemy import insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import safe_commit
from db_models import CenterHoliday
from errors import PersistenceError

logger = logging.getLogger(__name__)

# 4 bound values per row keeps each statement under SQLite's 999 variable limit
INSERT_CHUNK_SIZE = 200

UNIQUE_COLUMNS = ["center_id", "holiday_date"]


def _build_insert(dialect_name: str, rows: List[Dict[str, Any]]):
    table = CenterHoliday.__table__

    if dialect_name == "postgresql":
        return postgresql.insert(table).values(rows).on_conflict_do_nothing(index_elements=UNIQUE_COLUMNS)
    if dialect_name == "sqlite":
        return sqlite.insert(table).values(rows).on_conflict_do_nothing(index_elements=UNIQUE_COLUMNS)
    if dialect_name in ("mysql", "mariadb"):
        return insert(table).values(rows).prefix_with("IGNORE")

    raise PersistenceError(f"Skip-duplicates insert not supported for dialect '{dialect_name}'")


def insert_holidays_skip_duplicates(db: Session, rows: List[Dict[str, Any]]) -> int:
    """
    Insert holiday rows, silently skipping any (center_id, holiday_date) that already exists.

    Args:
        db: SQLAlchemy session
        rows: dicts with center_id, holiday_date, holiday_name, is_regular

    Returns:
        Number of rows actually inserted

    Raises:
        PersistenceError: the insert or commit failed (transaction rolled back)
    """
    if not rows:
        return 0

    dialect_name = db.get_bind().dialect.name
    inserted = 0

    try:
        for start in range(0, len(rows), INSERT_CHUNK_SIZE):
            chunk = rows[start:start + INSERT_CHUNK_SIZE]
            result = db.execute(_build_insert(dialect_name, chunk))
            inserted += max(result.rowcount or 0, 0)
        safe_commit(db)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Holiday insert failed ({len(rows)} candidate rows): {e}")
        raise PersistenceError("Failed to insert center holidays", original=e) from e

    logger.debug(f"Inserted {inserted} of {len(rows)} candidate holiday rows")
    return inserted
