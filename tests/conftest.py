import os
from datetime import datetime, time
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from gym_backend.database import Base, enable_sqlite_write_locking  # noqa: E402
from gym_backend.models.appointment import Appointment, AppointmentStatus  # noqa: E402
from gym_backend.models.availability import TrainerAvailability  # noqa: E402
from gym_backend.models.gym import GymLocation, Service  # noqa: E402
from gym_backend.models.member import Member  # noqa: E402
from gym_backend.models.trainer import Trainer, TrainerSpecialty  # noqa: E402
from gym_backend.models.user import User  # noqa: E402, F401
from gym_backend.models.working_hours import WorkingHours  # noqa: E402

# day_of_week: 0 is Sunday, 1 is Monday.
MONDAY_09_TO_17 = ((1, time(9, 0), time(17, 0)),)


class FixedClock:
    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current


class GymBuilder:
    """Seeds one location open Monday-Saturday 08:00-20:00 and closed on Sunday."""

    def __init__(self, db):
        self.db = db
        self._sequence = 0

        self.location = GymLocation(name='Downtown', address='1 Main St', city='Springfield')
        db.add(self.location)
        db.flush()

        for day in range(1, 7):
            db.add(
                WorkingHours(
                    gym_location_id=self.location.id,
                    day_of_week=day,
                    open_time=time(8, 0),
                    close_time=time(20, 0),
                )
            )
        db.add(
            WorkingHours(
                gym_location_id=self.location.id,
                day_of_week=0,
                open_time=time(8, 0),
                close_time=time(20, 0),
                is_closed=True,
            )
        )

        self.service = self.add_service('Personal Training', price=Decimal('50.00'))
        db.commit()

    def _next(self) -> int:
        self._sequence += 1
        return self._sequence

    def add_service(self, name: str, price: Decimal = Decimal('40.00')) -> Service:
        service = Service(name=name, duration_minutes=60, price=price, gym_location_id=self.location.id)
        self.db.add(service)
        self.db.commit()
        return service

    def add_trainer(self, windows=MONDAY_09_TO_17, services=None, is_active: bool = True) -> Trainer:
        number = self._next()
        trainer = Trainer(
            first_name='Trainer',
            last_name=str(number),
            email=f'trainer{number}@gym.example',
            gym_location_id=self.location.id,
            is_active=is_active,
        )
        self.db.add(trainer)
        self.db.flush()

        for day_of_week, start_time, end_time in windows:
            self.db.add(
                TrainerAvailability(
                    trainer_id=trainer.id,
                    day_of_week=day_of_week,
                    start_time=start_time,
                    end_time=end_time,
                )
            )
        for service in (self.service,) if services is None else services:
            self.db.add(TrainerSpecialty(trainer_id=trainer.id, service_id=service.id, experience_years=3))

        self.db.commit()
        return trainer

    def add_member(self, is_active: bool = True) -> Member:
        number = self._next()
        member = Member(
            first_name='Member',
            last_name=str(number),
            email=f'member{number}@gym.example',
            is_active=is_active,
        )
        self.db.add(member)
        self.db.commit()
        return member

    def add_appointment(
        self,
        trainer: Trainer,
        member: Member,
        start: datetime,
        duration_minutes: int = 60,
        status: AppointmentStatus = AppointmentStatus.PENDING,
        notes: str | None = None,
        is_active: bool = True,
    ) -> Appointment:
        appointment = Appointment(
            member_id=member.id,
            trainer_id=trainer.id,
            service_id=self.service.id,
            appointment_date=start,
            duration_minutes=duration_minutes,
            price=Decimal('50.00'),
            status=status.value,
            notes=notes,
            is_active=is_active,
        )
        self.db.add(appointment)
        self.db.commit()
        return appointment


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'gym.db'}")
    enable_sqlite_write_locking(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def appointment_db(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def gym(appointment_db) -> GymBuilder:
    return GymBuilder(appointment_db)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 1, 1, 8, 30))
