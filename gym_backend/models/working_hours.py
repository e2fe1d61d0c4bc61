"""Gym working hours model definitions."""

from sqlalchemy import Boolean, Column, Integer, ForeignKey, Time
from gym_backend.database import Base, EntityMixin


class WorkingHours(EntityMixin, Base):
    """Weekly opening window of a gym location. is_closed wins over the times."""
    __tablename__ = "working_hours"

    gym_location_id = Column(Integer, ForeignKey("gym_locations.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0-6 (Sunday-Saturday)
    open_time = Column(Time, nullable=False)
    close_time = Column(Time, nullable=False)
    is_closed = Column(Boolean, nullable=False, default=False)
