"""Trainer availability model definitions."""

from sqlalchemy import Column, Integer, ForeignKey, Time
from gym_backend.database import Base, EntityMixin


class TrainerAvailability(EntityMixin, Base):
    """Recurring weekly window in which a trainer can be booked.

    day_of_week runs 0-6 starting on Sunday, see overlap.day_of_week.
    """
    __tablename__ = "trainer_availability"

    trainer_id = Column(Integer, ForeignKey("trainers.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
