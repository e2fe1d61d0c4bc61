"""Member model definitions."""

from sqlalchemy import Column, DateTime, String
from gym_backend.database import Base, EntityMixin


class Member(EntityMixin, Base):
    """Represents a gym member."""
    __tablename__ = "members"

    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True)
    phone_number = Column(String, nullable=True)
    membership_start_date = Column(DateTime, nullable=True)
    membership_end_date = Column(DateTime, nullable=True)
