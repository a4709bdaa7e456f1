# db_models.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Date, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database import Base


class Center(Base):
    """Support center, owned by the directory module (read-only here)"""
    __tablename__ = "centers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Administrative temporary closure (임시휴무)
    is_temp_closed = Column(Boolean, default=False, nullable=False)
    temp_closed_until = Column(Date, nullable=True)  # Resume date

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    operating_hours = relationship(
        "CenterOperatingHour",
        back_populates="center",
        cascade="all, delete-orphan",
        order_by="CenterOperatingHour.day_of_week",
    )
    holidays = relationship("CenterHoliday", back_populates="center", cascade="all, delete-orphan")


class CenterOperatingHour(Base):
    """Weekly operating-hours template, one row per weekday"""
    __tablename__ = "center_operating_hours"
    __table_args__ = (
        UniqueConstraint("center_id", "day_of_week", name="uq_operating_hours_center_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    center_id = Column(Integer, ForeignKey("centers.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0=Sunday ... 6=Saturday
    # Stored as HH:MM, e.g. "09:00"; null when closed that day
    open_time = Column(String(5), nullable=True)
    close_time = Column(String(5), nullable=True)
    is_open = Column(Boolean, default=True, nullable=False)

    center = relationship("Center", back_populates="operating_hours")


class CenterHoliday(Base):
    """Dated closure for a center: public holiday or materialized weekly closure"""
    __tablename__ = "center_holidays"
    __table_args__ = (
        UniqueConstraint("center_id", "holiday_date", name="uq_center_holidays_center_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    center_id = Column(Integer, ForeignKey("centers.id", ondelete="CASCADE"), nullable=False, index=True)
    holiday_date = Column(Date, nullable=False)
    holiday_name = Column(String, nullable=False)
    is_regular = Column(Boolean, default=False, nullable=False)  # True = weekly closure
    created_at = Column(DateTime, default=func.now())

    center = relationship("Center", back_populates="holidays")
