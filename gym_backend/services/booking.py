"""Appointment booking.

A booking runs as one transaction: the trainer and member rows are locked,
the trainer, member and opening-hours checks run in that order, and only
when all of them pass is the pending appointment written and committed.
Any rejection or error rolls the transaction back.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from gym_backend.core.clock import Clock, system_clock
from gym_backend.database import begin_write_transaction
from gym_backend.models.appointment import Appointment, AppointmentStatus
from gym_backend.models.gym import GymLocation, Service
from gym_backend.models.member import Member
from gym_backend.models.trainer import Trainer
from gym_backend.models.working_hours import WorkingHours
from gym_backend.repositories.repository import Repository
from gym_backend.schemas.appointment import AppointmentResponse
from gym_backend.schemas.responses import ServiceResponse
from gym_backend.services import results
from gym_backend.services.availability import check_member_availability, check_trainer_availability
from gym_backend.services.overlap import day_of_week, day_window

logger = logging.getLogger(__name__)


def is_location_open(db: Session, gym_location_id: int, start: datetime, duration_minutes: int) -> bool:
    window = day_window(start, duration_minutes)
    if window is None:
        return False

    start_time, end_time = window
    return Repository(db, WorkingHours).exists_where(
        WorkingHours.gym_location_id == gym_location_id,
        WorkingHours.day_of_week == day_of_week(start),
        WorkingHours.is_closed.is_(False),
        WorkingHours.open_time <= start_time,
        WorkingHours.close_time >= end_time,
    )


def book_appointment(
    db: Session,
    member_id: int,
    trainer_id: int,
    service_id: int,
    start: datetime,
    duration_minutes: int,
    price: Decimal | None = None,
    notes: str | None = None,
    clock: Clock | None = None,
) -> ServiceResponse:
    rejected = results.invalid_duration(duration_minutes)
    if rejected:
        return rejected

    try:
        begin_write_transaction(db)
        response = _book(
            db, member_id, trainer_id, service_id, start, duration_minutes, price, notes, clock or system_clock
        )
        if not response.is_successful:
            db.rollback()
        return response
    except Exception:
        db.rollback()
        logger.exception(
            'Booking failed. member_id=%s trainer_id=%s service_id=%s start=%s',
            member_id, trainer_id, service_id, start,
        )
        return results.unexpected('Appointment could not be booked.', results.BOOKING_FAILED)


def _book(
    db: Session,
    member_id: int,
    trainer_id: int,
    service_id: int,
    start: datetime,
    duration_minutes: int,
    price: Decimal | None,
    notes: str | None,
    clock: Clock,
) -> ServiceResponse:
    # Lock order is trainer then member for every booking.
    if Repository(db, Trainer).get_by_id(trainer_id, for_update=True) is None:
        return results.not_found('Trainer not found.', results.TRAINER_NOT_FOUND)
    member = Repository(db, Member).get_by_id(member_id, for_update=True)

    trainer_check = check_trainer_availability(db, trainer_id, start, duration_minutes)
    if not trainer_check.is_successful:
        return trainer_check

    if member is None:
        return results.not_found('Member not found.', results.MEMBER_NOT_FOUND)

    member_check = check_member_availability(db, member_id, start, duration_minutes)
    if not member_check.is_successful:
        return member_check

    service = Repository(db, Service).get_by_id(service_id)
    if service is None:
        return results.not_found('Service not found.', results.SERVICE_NOT_FOUND)

    location = Repository(db, GymLocation).get_by_id(service.gym_location_id)
    if location is None:
        return results.not_found('Gym location not found.', results.LOCATION_NOT_FOUND)

    if not is_location_open(db, location.id, start, duration_minutes):
        return results.failure(
            'The gym location is closed on the selected day and time.',
            results.LOCATION_CLOSED,
        )

    repository = Repository(db, Appointment)
    appointment = repository.add(
        Appointment(
            member_id=member_id,
            trainer_id=trainer_id,
            service_id=service_id,
            appointment_date=start,
            duration_minutes=duration_minutes,
            price=service.price if price is None else price,
            status=AppointmentStatus.PENDING.value,
            notes=notes,
            created_at=clock.now(),
            is_active=True,
        )
    )
    repository.commit()
    db.refresh(appointment)

    logger.info(
        'Appointment booked. appointment_id=%s trainer_id=%s member_id=%s start=%s',
        appointment.id, trainer_id, member_id, start,
    )
    return results.success(AppointmentResponse.model_validate(appointment), 'Appointment booked.')
