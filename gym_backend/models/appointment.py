"""Appointment model definitions."""

import enum

from sqlalchemy import Column, Integer, DateTime, ForeignKey, Numeric, String
from gym_backend.database import Base, EntityMixin


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Appointment(EntityMixin, Base):
    """A member's session with a trainer for one service."""
    __tablename__ = "appointments"

    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    trainer_id = Column(Integer, ForeignKey("trainers.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    appointment_date = Column(DateTime, nullable=False)  # facility-local, no offset
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(String, nullable=False, default=AppointmentStatus.PENDING.value)
    notes = Column(String, nullable=True)
