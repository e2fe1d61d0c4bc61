from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gym_backend.auth.dependencies import ADMIN, GYM_OWNER, MEMBER, TRAINER, require_roles
from gym_backend.core import config
from gym_backend.core.clock import Clock, get_clock
from gym_backend.database import SessionLocal, ensure_appointment_schema, get_db
from gym_backend.schemas.appointment import (
    AppointmentResponse,
    AvailabilityResponse,
    AvailableTrainersResponse,
    BookAppointmentRequest,
    CancelAppointmentRequest,
    to_facility_time,
)
from gym_backend.schemas.responses import ServiceResponse
from gym_backend.services import availability, booking, lifecycle, trainer_finder

router = APIRouter(tags=['appointments'])


def ensure_database_ready() -> None:
    try:
        ensure_appointment_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and database credentials.',
        ) from exc


def unwrap(response: ServiceResponse):
    if response.is_successful:
        return response.data

    error = response.error
    raise HTTPException(
        status_code=error.status_code if error else status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            'error': error.message if error else 'Request failed.',
            'error_code': error.error_code if error else None,
        },
    )


def availability_result(response: ServiceResponse) -> AvailabilityResponse:
    # Rule violations are a normal "not available" answer; only server errors raise.
    if response.error is not None and response.error.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        unwrap(response)

    if response.is_successful:
        return AvailabilityResponse(available=True, message=response.message)

    return AvailabilityResponse(
        available=False,
        message=response.error.message if response.error else None,
        error_code=response.error.error_code if response.error else None,
    )


@router.get(
    '',
    response_model=list[AppointmentResponse],
    dependencies=[Depends(require_roles(ADMIN, GYM_OWNER))],
)
def list_appointments(db: Session = Depends(get_db)):
    ensure_database_ready()
    return unwrap(lifecycle.get_appointments(db))


@router.get(
    '/check-availability',
    response_model=AvailabilityResponse,
    dependencies=[Depends(require_roles(MEMBER, ADMIN, GYM_OWNER))],
)
def check_availability(
    trainer_id: int = Query(...),
    appointment_date: datetime = Query(...),
    duration_minutes: int = Query(...),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    return availability_result(
        availability.check_trainer_availability(
            db, trainer_id, to_facility_time(appointment_date), duration_minutes
        )
    )


@router.get(
    '/check-member-availability',
    response_model=AvailabilityResponse,
    dependencies=[Depends(require_roles(MEMBER, ADMIN, GYM_OWNER))],
)
def check_member_availability(
    member_id: int = Query(...),
    appointment_date: datetime = Query(...),
    duration_minutes: int = Query(...),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    return availability_result(
        availability.check_member_availability(
            db, member_id, to_facility_time(appointment_date), duration_minutes
        )
    )


@router.get(
    '/available-trainers',
    response_model=AvailableTrainersResponse,
    dependencies=[Depends(require_roles(MEMBER, ADMIN, GYM_OWNER))],
)
def list_available_trainers(
    service_id: int = Query(...),
    appointment_date: datetime = Query(...),
    duration_minutes: int = Query(...),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    start = to_facility_time(appointment_date)
    trainer_ids = unwrap(
        trainer_finder.find_available_trainers(
            db,
            service_id,
            start,
            duration_minutes,
            max_workers=config.TRAINER_SEARCH_MAX_WORKERS,
            session_factory=SessionLocal,
        )
    )
    return AvailableTrainersResponse(
        service_id=service_id,
        appointment_date=start,
        duration_minutes=duration_minutes,
        trainer_ids=trainer_ids,
    )


@router.get(
    '/member/{member_id}',
    response_model=list[AppointmentResponse],
    dependencies=[Depends(require_roles(MEMBER, ADMIN, GYM_OWNER))],
)
def list_member_appointments(member_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()
    return unwrap(lifecycle.get_member_appointments(db, member_id))


@router.get(
    '/trainer/{trainer_id}',
    response_model=list[AppointmentResponse],
    dependencies=[Depends(require_roles(ADMIN, GYM_OWNER, TRAINER))],
)
def list_trainer_appointments(trainer_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()
    return unwrap(lifecycle.get_trainer_appointments(db, trainer_id))


@router.get(
    '/{appointment_id}',
    response_model=AppointmentResponse,
    dependencies=[Depends(require_roles(ADMIN, GYM_OWNER, MEMBER))],
)
def get_appointment(appointment_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()
    return unwrap(lifecycle.get_appointment(db, appointment_id))


@router.post(
    '',
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(MEMBER, ADMIN))],
)
def create_appointment(
    data: BookAppointmentRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    ensure_database_ready()
    return unwrap(
        booking.book_appointment(
            db,
            member_id=data.member_id,
            trainer_id=data.trainer_id,
            service_id=data.service_id,
            start=data.appointment_date,
            duration_minutes=data.duration_minutes,
            price=data.price,
            notes=data.notes,
            clock=clock,
        )
    )


@router.put(
    '/{appointment_id}/confirm',
    response_model=AppointmentResponse,
    dependencies=[Depends(require_roles(ADMIN, GYM_OWNER))],
)
def confirm_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    ensure_database_ready()
    return unwrap(lifecycle.confirm_appointment(db, appointment_id, clock=clock))


@router.put(
    '/{appointment_id}/cancel',
    response_model=AppointmentResponse,
    dependencies=[Depends(require_roles(MEMBER, ADMIN))],
)
def cancel_appointment(
    appointment_id: int,
    data: CancelAppointmentRequest | None = None,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    ensure_database_ready()
    reason = data.reason if data else None
    return unwrap(lifecycle.cancel_appointment(db, appointment_id, reason=reason, clock=clock))


@router.delete(
    '/{appointment_id}',
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(ADMIN, MEMBER))],
)
def delete_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    ensure_database_ready()
    unwrap(lifecycle.delete_appointment(db, appointment_id, clock=clock))
