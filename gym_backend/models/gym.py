"""Gym location and service catalog model definitions."""

from sqlalchemy import Column, Integer, ForeignKey, Numeric, String
from gym_backend.database import Base, EntityMixin


class GymLocation(EntityMixin, Base):
    """Represents a gym branch."""
    __tablename__ = "gym_locations"

    name = Column(String, nullable=False)
    address = Column(String, nullable=False, default="")
    city = Column(String, nullable=False, default="")
    phone_number = Column(String, nullable=True)
    email = Column(String, nullable=True)


class Service(EntityMixin, Base):
    """A bookable service (fitness, yoga, pilates...) offered at one location."""
    __tablename__ = "services"

    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    duration_minutes = Column(Integer, nullable=False, default=60)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    gym_location_id = Column(Integer, ForeignKey("gym_locations.id"), nullable=False)
