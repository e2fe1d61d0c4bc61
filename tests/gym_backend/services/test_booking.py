from datetime import datetime, time
from decimal import Decimal

import pytest

from gym_backend.models.appointment import Appointment, AppointmentStatus
from gym_backend.models.member import Member
from gym_backend.models.trainer import Trainer
from gym_backend.repositories.repository import Repository
from gym_backend.services import results
from gym_backend.services.booking import book_appointment, is_location_open

MONDAY_10 = datetime(2026, 1, 5, 10, 0)
SUNDAY_10 = datetime(2026, 1, 11, 10, 0)


def appointment_count(db) -> int:
    return db.query(Appointment).count()


def book(db, gym, trainer, member, start=MONDAY_10, duration_minutes=60, **kwargs):
    return book_appointment(
        db,
        member_id=member.id,
        trainer_id=trainer.id,
        service_id=kwargs.pop('service_id', gym.service.id),
        start=start,
        duration_minutes=duration_minutes,
        **kwargs,
    )


def test_booking_free_slot_creates_pending_appointment(appointment_db, gym, clock) -> None:
    trainer = gym.add_trainer()
    member = gym.add_member()

    response = book(appointment_db, gym, trainer, member, price=Decimal('45.00'), notes='First session', clock=clock)

    assert response.is_successful is True
    appointment = response.data
    assert appointment.status == AppointmentStatus.PENDING.value
    assert appointment.trainer_id == trainer.id
    assert appointment.member_id == member.id
    assert appointment.appointment_date == MONDAY_10
    assert appointment.duration_minutes == 60
    assert appointment.price == Decimal('45.00')
    assert appointment.notes == 'First session'
    assert appointment.created_at == clock.now()
    assert appointment.is_active is True
    assert appointment_count(appointment_db) == 1


def test_booking_without_price_uses_service_price(appointment_db, gym, clock) -> None:
    response = book(appointment_db, gym, gym.add_trainer(), gym.add_member(), clock=clock)

    assert response.is_successful is True
    assert response.data.price == Decimal('50.00')


def test_booking_overlapping_trainer_slot_is_rejected_and_not_persisted(appointment_db, gym, clock) -> None:
    trainer = gym.add_trainer()
    gym.add_appointment(trainer, gym.add_member(), MONDAY_10, 60)

    response = book(appointment_db, gym, trainer, gym.add_member(), start=datetime(2026, 1, 5, 10, 30), clock=clock)

    assert response.is_successful is False
    assert response.error.error_code == results.TRAINER_DOUBLE_BOOKED
    assert response.error.status_code == 400
    assert appointment_count(appointment_db) == 1


def test_booking_outside_trainer_window_is_rejected(appointment_db, gym, clock) -> None:
    response = book(
        appointment_db, gym, gym.add_trainer(), gym.add_member(),
        start=datetime(2026, 1, 5, 17, 30), duration_minutes=30, clock=clock,
    )

    assert response.error.error_code == results.TRAINER_UNAVAILABLE
    assert appointment_count(appointment_db) == 0


def test_booking_on_closed_day_is_rejected(appointment_db, gym, clock) -> None:
    trainer = gym.add_trainer(windows=((0, time(9, 0), time(17, 0)),))

    response = book(appointment_db, gym, trainer, gym.add_member(), start=SUNDAY_10, clock=clock)

    assert response.is_successful is False
    assert response.error.error_code == results.LOCATION_CLOSED
    assert response.error.status_code == 400
    assert appointment_count(appointment_db) == 0


def test_booking_past_closing_time_is_rejected(appointment_db, gym, clock) -> None:
    trainer = gym.add_trainer(windows=((1, time(9, 0), time(22, 0)),))

    response = book(appointment_db, gym, trainer, gym.add_member(), start=datetime(2026, 1, 5, 19, 30), clock=clock)

    assert response.error.error_code == results.LOCATION_CLOSED


def test_booking_reports_trainer_conflict_before_member_conflict(appointment_db, gym, clock) -> None:
    trainer = gym.add_trainer()
    member = gym.add_member()
    gym.add_appointment(trainer, member, MONDAY_10, 60)

    response = book(appointment_db, gym, trainer, member, clock=clock)

    assert response.error.error_code == results.TRAINER_DOUBLE_BOOKED


def test_booking_reports_trainer_conflict_before_unknown_member(appointment_db, gym, clock) -> None:
    trainer = gym.add_trainer()
    gym.add_appointment(trainer, gym.add_member(), MONDAY_10, 60)

    response = book_appointment(
        appointment_db,
        member_id=999,
        trainer_id=trainer.id,
        service_id=gym.service.id,
        start=datetime(2026, 1, 5, 10, 30),
        duration_minutes=60,
        clock=clock,
    )

    assert response.error.error_code == results.TRAINER_DOUBLE_BOOKED
    assert response.error.status_code == 400


def test_booking_member_conflict_with_other_trainer(appointment_db, gym, clock) -> None:
    member = gym.add_member()
    gym.add_appointment(gym.add_trainer(), member, MONDAY_10, 60)

    response = book(appointment_db, gym, gym.add_trainer(), member, start=datetime(2026, 1, 5, 10, 30), clock=clock)

    assert response.error.error_code == results.MEMBER_DOUBLE_BOOKED
    assert appointment_count(appointment_db) == 1


def test_booking_unknown_service_is_not_found(appointment_db, gym, clock) -> None:
    response = book(appointment_db, gym, gym.add_trainer(), gym.add_member(), service_id=999, clock=clock)

    assert response.error.error_code == results.SERVICE_NOT_FOUND
    assert response.error.status_code == 404
    assert appointment_count(appointment_db) == 0


def test_booking_at_deleted_location_is_not_found(appointment_db, gym, clock) -> None:
    trainer = gym.add_trainer()
    member = gym.add_member()
    gym.location.is_active = False
    appointment_db.commit()

    response = book(appointment_db, gym, trainer, member, clock=clock)

    assert response.error.error_code == results.LOCATION_NOT_FOUND
    assert response.error.status_code == 404
    assert appointment_count(appointment_db) == 0


def test_booking_unknown_or_deleted_trainer_and_member_are_not_found(appointment_db, gym, clock) -> None:
    trainer = gym.add_trainer()
    member = gym.add_member()
    deleted_trainer = gym.add_trainer(is_active=False)
    deleted_member = gym.add_member(is_active=False)

    trainer_response = book(appointment_db, gym, deleted_trainer, member, clock=clock)
    member_response = book(appointment_db, gym, trainer, deleted_member, clock=clock)

    assert trainer_response.error.error_code == results.TRAINER_NOT_FOUND
    assert trainer_response.error.status_code == 404
    assert member_response.error.error_code == results.MEMBER_NOT_FOUND
    assert appointment_count(appointment_db) == 0


def test_back_to_back_bookings_both_succeed(appointment_db, gym, clock) -> None:
    trainer = gym.add_trainer()

    first = book(appointment_db, gym, trainer, gym.add_member(), start=MONDAY_10, clock=clock)
    second = book(appointment_db, gym, trainer, gym.add_member(), start=datetime(2026, 1, 5, 11, 0), clock=clock)
    overlapping = book(appointment_db, gym, trainer, gym.add_member(), start=datetime(2026, 1, 5, 10, 59), clock=clock)

    assert first.is_successful is True
    assert second.is_successful is True
    assert overlapping.error.error_code == results.TRAINER_DOUBLE_BOOKED
    assert appointment_count(appointment_db) == 2


def test_booking_rejects_non_positive_duration(appointment_db, gym, clock) -> None:
    response = book(appointment_db, gym, gym.add_trainer(), gym.add_member(), duration_minutes=0, clock=clock)

    assert response.error.error_code == results.INVALID_DURATION


def test_booking_failure_inside_transaction_rolls_back(
    appointment_db, gym, clock, monkeypatch: pytest.MonkeyPatch
) -> None:
    trainer = gym.add_trainer()
    member = gym.add_member()

    def explode(*_args, **_kwargs):
        raise RuntimeError('disk full')

    monkeypatch.setattr('gym_backend.services.booking.is_location_open', explode)

    response = book(appointment_db, gym, trainer, member, clock=clock)

    assert response.error.error_code == results.BOOKING_FAILED
    assert response.error.status_code == 500
    assert 'disk full' not in response.error.message
    assert appointment_count(appointment_db) == 0


def test_location_open_requires_whole_slot_inside_opening_hours(appointment_db, gym) -> None:
    location_id = gym.location.id

    assert is_location_open(appointment_db, location_id, datetime(2026, 1, 5, 8, 0), 60)
    assert is_location_open(appointment_db, location_id, datetime(2026, 1, 5, 19, 0), 60)
    assert not is_location_open(appointment_db, location_id, datetime(2026, 1, 5, 7, 30), 60)
    assert not is_location_open(appointment_db, location_id, SUNDAY_10, 60)
    assert not is_location_open(appointment_db, 999, MONDAY_10, 60)


def test_booking_locks_trainer_then_member(appointment_db, gym, clock, monkeypatch: pytest.MonkeyPatch) -> None:
    trainer = gym.add_trainer()
    member = gym.add_member()
    trainer_id, member_id = trainer.id, member.id
    lookups = []
    original_get_by_id = Repository.get_by_id

    def recording_get_by_id(self, entity_id, **kwargs):
        lookups.append((self.model, entity_id, kwargs.get('for_update', False)))
        return original_get_by_id(self, entity_id, **kwargs)

    monkeypatch.setattr(Repository, 'get_by_id', recording_get_by_id)

    response = book(appointment_db, gym, trainer, member, clock=clock)

    assert response.is_successful is True
    locked = [(model, entity_id) for model, entity_id, for_update in lookups if for_update]
    assert locked == [(Trainer, trainer_id), (Member, member_id)]
