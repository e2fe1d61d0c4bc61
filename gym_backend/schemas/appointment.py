from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from gym_backend.core import config


def to_facility_time(value: datetime) -> datetime:
    """Wall-clock time at the facility; any UTC offset is dropped, not converted."""
    return value.replace(tzinfo=None)


class BookAppointmentRequest(BaseModel):
    member_id: int
    trainer_id: int
    service_id: int
    appointment_date: datetime
    duration_minutes: int = Field(gt=0)
    price: Decimal | None = Field(default=None, ge=0)
    notes: str | None = None

    @field_validator('appointment_date')
    @classmethod
    def validate_appointment_date(cls, value: datetime) -> datetime:
        if value.second or value.microsecond:
            raise ValueError('Appointment date must fall on a whole minute.')
        return to_facility_time(value)

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > config.MAX_APPOINTMENT_NOTES_LENGTH:
            raise ValueError(f'Notes must be {config.MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')

        return normalized


class CancelAppointmentRequest(BaseModel):
    reason: str | None = None

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None


class AppointmentResponse(BaseModel):
    id: int
    member_id: int
    trainer_id: int
    service_id: int
    appointment_date: datetime
    duration_minutes: int
    price: Decimal
    status: str
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_active: bool

    class Config:
        from_attributes = True


class AvailabilityResponse(BaseModel):
    available: bool
    message: str | None = None
    error_code: str | None = None


class AvailableTrainersResponse(BaseModel):
    service_id: int
    appointment_date: datetime
    duration_minutes: int
    trainer_ids: list[int]
