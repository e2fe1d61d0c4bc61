"""Trainer and member availability checks.

Both checks only read; they can be called on their own or as the first two
steps of a booking.
"""

import calendar
import logging
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from gym_backend.models.appointment import Appointment, AppointmentStatus
from gym_backend.models.availability import TrainerAvailability
from gym_backend.repositories.repository import Repository
from gym_backend.schemas.responses import ServiceResponse
from gym_backend.services import results
from gym_backend.services.overlap import day_of_week, day_window, interval_end, intervals_overlap

logger = logging.getLogger(__name__)


def find_conflicting_appointment(
    db: Session, start: datetime, duration_minutes: int, *criteria: Any
) -> Appointment | None:
    candidate_end = interval_end(start, duration_minutes)
    # Anything starting at or after the candidate's end cannot overlap it.
    candidates = Repository(db, Appointment).list_where(
        *criteria,
        Appointment.status != AppointmentStatus.CANCELLED.value,
        Appointment.appointment_date < candidate_end,
    )
    for appointment in candidates:
        if intervals_overlap(start, duration_minutes, appointment.appointment_date, appointment.duration_minutes):
            return appointment
    return None


def has_availability_window(db: Session, trainer_id: int, start: datetime, duration_minutes: int) -> bool:
    window = day_window(start, duration_minutes)
    if window is None:
        return False

    start_time, end_time = window
    return Repository(db, TrainerAvailability).exists_where(
        TrainerAvailability.trainer_id == trainer_id,
        TrainerAvailability.day_of_week == day_of_week(start),
        TrainerAvailability.start_time <= start_time,
        TrainerAvailability.end_time >= end_time,
    )


def check_trainer_availability(
    db: Session, trainer_id: int, start: datetime, duration_minutes: int
) -> ServiceResponse:
    rejected = results.invalid_duration(duration_minutes)
    if rejected:
        return rejected

    try:
        conflict = find_conflicting_appointment(
            db, start, duration_minutes, Appointment.trainer_id == trainer_id
        )
        if conflict is not None:
            return results.failure(
                'Trainer already has an appointment at the selected time.',
                results.TRAINER_DOUBLE_BOOKED,
            )

        if not has_availability_window(db, trainer_id, start, duration_minutes):
            end = interval_end(start, duration_minutes)
            return results.failure(
                f'Trainer is not available on {calendar.day_name[start.weekday()]} '
                f'between {start:%H:%M} and {end:%H:%M}.',
                results.TRAINER_UNAVAILABLE,
            )

        return results.success(True, 'Trainer is available.')
    except Exception:
        logger.exception('Trainer availability check failed. trainer_id=%s start=%s', trainer_id, start)
        return results.unexpected('Availability check failed.', results.AVAILABILITY_CHECK_FAILED)


def check_member_availability(
    db: Session, member_id: int, start: datetime, duration_minutes: int
) -> ServiceResponse:
    rejected = results.invalid_duration(duration_minutes)
    if rejected:
        return rejected

    try:
        conflict = find_conflicting_appointment(
            db, start, duration_minutes, Appointment.member_id == member_id
        )
        if conflict is not None:
            return results.failure(
                'Member already has an appointment at the selected time.',
                results.MEMBER_DOUBLE_BOOKED,
            )

        return results.success(True, 'Member is available.')
    except Exception:
        logger.exception('Member availability check failed. member_id=%s start=%s', member_id, start)
        return results.unexpected('Availability check failed.', results.AVAILABILITY_CHECK_FAILED)
