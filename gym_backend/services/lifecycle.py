"""Appointment state transitions and appointment queries.

States: pending -> confirmed, pending/confirmed -> cancelled. completed is
written outside the booking engine and can no longer be cancelled.
"""

import logging

from sqlalchemy.orm import Session

from gym_backend.core.clock import Clock, system_clock
from gym_backend.database import begin_write_transaction
from gym_backend.models.appointment import Appointment, AppointmentStatus
from gym_backend.repositories.repository import Repository
from gym_backend.schemas.appointment import AppointmentResponse
from gym_backend.schemas.responses import ServiceResponse
from gym_backend.services import results

logger = logging.getLogger(__name__)

CANCELLATION_REASON_PREFIX = 'Cancellation reason: '


def append_cancellation_reason(notes: str | None, reason: str | None) -> str | None:
    if not reason:
        return notes
    line = f'{CANCELLATION_REASON_PREFIX}{reason}'
    return f'{notes}\n{line}' if notes else line


def _to_responses(appointments: list[Appointment]) -> list[AppointmentResponse]:
    return [AppointmentResponse.model_validate(appointment) for appointment in appointments]


def _appointment_not_found() -> ServiceResponse:
    return results.not_found('Appointment not found.', results.APPOINTMENT_NOT_FOUND)


def confirm_appointment(db: Session, appointment_id: int, clock: Clock | None = None) -> ServiceResponse:
    clock = clock or system_clock
    try:
        begin_write_transaction(db)
        repository = Repository(db, Appointment)
        appointment = repository.get_by_id(appointment_id, for_update=True)
        if appointment is None:
            db.rollback()
            return _appointment_not_found()

        if appointment.status != AppointmentStatus.PENDING.value:
            db.rollback()
            return results.failure('Only pending appointments can be confirmed.', results.APPOINTMENT_NOT_PENDING)

        appointment.status = AppointmentStatus.CONFIRMED.value
        appointment.updated_at = clock.now()
        repository.update(appointment)
        repository.commit()
        db.refresh(appointment)

        logger.info('Appointment confirmed. appointment_id=%s', appointment_id)
        return results.success(AppointmentResponse.model_validate(appointment), 'Appointment confirmed.')
    except Exception:
        db.rollback()
        logger.exception('Confirming appointment failed. appointment_id=%s', appointment_id)
        return results.unexpected('Appointment could not be confirmed.', results.CONFIRM_FAILED)


def cancel_appointment(
    db: Session, appointment_id: int, reason: str | None = None, clock: Clock | None = None
) -> ServiceResponse:
    clock = clock or system_clock
    try:
        begin_write_transaction(db)
        repository = Repository(db, Appointment)
        appointment = repository.get_by_id(appointment_id, for_update=True)
        if appointment is None:
            db.rollback()
            return _appointment_not_found()

        if appointment.status == AppointmentStatus.CANCELLED.value:
            db.rollback()
            return results.failure('Appointment is already cancelled.', results.APPOINTMENT_ALREADY_CANCELLED)

        if appointment.status == AppointmentStatus.COMPLETED.value:
            db.rollback()
            return results.failure('Completed appointments cannot be cancelled.', results.APPOINTMENT_COMPLETED)

        appointment.status = AppointmentStatus.CANCELLED.value
        appointment.updated_at = clock.now()
        appointment.notes = append_cancellation_reason(appointment.notes, reason)
        repository.update(appointment)
        repository.commit()
        db.refresh(appointment)

        logger.info('Appointment cancelled. appointment_id=%s', appointment_id)
        return results.success(AppointmentResponse.model_validate(appointment), 'Appointment cancelled.')
    except Exception:
        db.rollback()
        logger.exception('Cancelling appointment failed. appointment_id=%s', appointment_id)
        return results.unexpected('Appointment could not be cancelled.', results.CANCEL_FAILED)


def delete_appointment(db: Session, appointment_id: int, clock: Clock | None = None) -> ServiceResponse:
    """Soft delete: the row stays but no longer blocks the slot or shows in listings."""
    clock = clock or system_clock
    try:
        begin_write_transaction(db)
        repository = Repository(db, Appointment)
        appointment = repository.get_by_id(appointment_id, for_update=True)
        if appointment is None:
            db.rollback()
            return _appointment_not_found()

        appointment.is_active = False
        appointment.updated_at = clock.now()
        repository.update(appointment)
        repository.commit()

        logger.info('Appointment deleted. appointment_id=%s', appointment_id)
        return results.success(True, 'Appointment deleted.')
    except Exception:
        db.rollback()
        logger.exception('Deleting appointment failed. appointment_id=%s', appointment_id)
        return results.unexpected('Appointment could not be deleted.', results.DELETE_FAILED)


def get_appointment(db: Session, appointment_id: int) -> ServiceResponse:
    try:
        appointment = Repository(db, Appointment).get_by_id(appointment_id)
        if appointment is None:
            return _appointment_not_found()
        return results.success(AppointmentResponse.model_validate(appointment))
    except Exception:
        logger.exception('Loading appointment failed. appointment_id=%s', appointment_id)
        return results.unexpected('Appointment could not be loaded.', results.APPOINTMENT_QUERY_FAILED)


def get_appointments(db: Session) -> ServiceResponse:
    try:
        appointments = Repository(db, Appointment).list_all(order_by=Appointment.appointment_date.desc())
        return results.success(_to_responses(appointments))
    except Exception:
        logger.exception('Listing appointments failed.')
        return results.unexpected('Appointments could not be loaded.', results.APPOINTMENT_QUERY_FAILED)


def get_member_appointments(db: Session, member_id: int) -> ServiceResponse:
    try:
        appointments = Repository(db, Appointment).list_where(
            Appointment.member_id == member_id,
            order_by=Appointment.appointment_date.desc(),
        )
        return results.success(_to_responses(appointments))
    except Exception:
        logger.exception('Listing member appointments failed. member_id=%s', member_id)
        return results.unexpected('Appointments could not be loaded.', results.APPOINTMENT_QUERY_FAILED)


def get_trainer_appointments(db: Session, trainer_id: int) -> ServiceResponse:
    try:
        appointments = Repository(db, Appointment).list_where(
            Appointment.trainer_id == trainer_id,
            order_by=Appointment.appointment_date.desc(),
        )
        return results.success(_to_responses(appointments))
    except Exception:
        logger.exception('Listing trainer appointments failed. trainer_id=%s', trainer_id)
        return results.unexpected('Appointments could not be loaded.', results.APPOINTMENT_QUERY_FAILED)
