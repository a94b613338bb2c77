import os
from datetime import date, time
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')

from spa_scheduler.core.enums import AppointmentStatus, DayOfWeek  # noqa: E402
from spa_scheduler.database import Base  # noqa: E402
from spa_scheduler.models.appointment import Appointment  # noqa: E402
from spa_scheduler.models.availability import StaffAvailability  # noqa: E402
from spa_scheduler.models.customer import Customer  # noqa: E402
from spa_scheduler.models.service import Service  # noqa: E402
from spa_scheduler.models.staff import Staff, StaffService  # noqa: E402

MONDAY = date(2026, 1, 5)


class Seeder:
    def __init__(self, db):
        self.db = db
        self._counter = 0

    def _save(self, record):
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def staff(self, **overrides) -> Staff:
        number = self._next()
        fields = {
            'email': f'staff{number}@spa.example',
            'first_name': 'Dana',
            'last_name': f'Staff{number}',
        }
        fields.update(overrides)
        return self._save(Staff(**fields))

    def customer(self, **overrides) -> Customer:
        number = self._next()
        fields = {
            'email': f'customer{number}@example.com',
            'first_name': 'Robin',
            'last_name': f'Customer{number}',
        }
        fields.update(overrides)
        return self._save(Customer(**fields))

    def service(self, duration_minutes: int = 60, price: str = '50.00', **overrides) -> Service:
        fields = {
            'name': f'Massage {duration_minutes}',
            'duration_minutes': duration_minutes,
            'price': Decimal(price),
        }
        fields.update(overrides)
        return self._save(Service(**fields))

    def capability(self, staff: Staff, service: Service) -> StaffService:
        return self._save(StaffService(staff_id=staff.id, service_id=service.id))

    def window(self, staff: Staff, day_of_week: DayOfWeek, start: time, end: time,
               is_active: bool = True) -> StaffAvailability:
        return self._save(
            StaffAvailability(
                staff_id=staff.id,
                day_of_week=day_of_week,
                start_time=start,
                end_time=end,
                is_active=is_active,
            )
        )

    def appointment(self, staff: Staff, service: Service, start: time, end: time,
                    appointment_date: date = MONDAY,
                    status: AppointmentStatus = AppointmentStatus.SCHEDULED, **overrides) -> Appointment:
        fields = {
            'staff_id': staff.id,
            'service_id': service.id,
            'guest_email': 'guest@example.com',
            'guest_first_name': 'Sam',
            'guest_last_name': 'Guest',
            'appointment_date': appointment_date,
            'start_time': start,
            'end_time': end,
            'status': status,
        }
        fields.update(overrides)
        return self._save(Appointment(**fields))


@pytest.fixture
def db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seed(db) -> Seeder:
    return Seeder(db)


@pytest.fixture
def monday_massage(seed):
    """Staff with a 09:00-12:00 Monday window, authorized for a 60 minute service."""
    staff = seed.staff()
    service = seed.service(duration_minutes=60)
    seed.capability(staff, service)
    seed.window(staff, DayOfWeek.MONDAY, time(9, 0), time(12, 0))
    return staff, service
