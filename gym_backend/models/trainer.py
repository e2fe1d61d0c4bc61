"""Trainer model definitions."""

from sqlalchemy import Column, Integer, ForeignKey, String
from gym_backend.database import Base, EntityMixin


class Trainer(EntityMixin, Base):
    """Represents a trainer on a location's roster."""
    __tablename__ = "trainers"

    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True)
    phone_number = Column(String, nullable=True)
    gym_location_id = Column(Integer, ForeignKey("gym_locations.id"), nullable=False)


class TrainerSpecialty(EntityMixin, Base):
    """Links a trainer to a service they are qualified to deliver."""
    __tablename__ = "trainer_specialties"

    trainer_id = Column(Integer, ForeignKey("trainers.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    experience_years = Column(Integer, nullable=False, default=0)
    certificate_name = Column(String, nullable=True)
