"""Availability model definitions."""

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, Time, func

from spa_scheduler.core.enums import DayOfWeek
from spa_scheduler.database import Base


class StaffAvailability(Base):
    """A recurring weekly window during which a staff member takes bookings."""
    __tablename__ = "staff_availability"

    id = Column(Integer, primary_key=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False, index=True)
    day_of_week = Column(
        Enum(DayOfWeek, name="day_of_week", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
