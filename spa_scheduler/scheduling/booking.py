"""Appointment creation and status changes."""

import logging
from contextlib import contextmanager
from datetime import date
from threading import Lock

from sqlalchemy.orm import Session

from spa_scheduler.core import config
from spa_scheduler.core.enums import ALLOWED_STATUS_TRANSITIONS, AppointmentStatus
from spa_scheduler.core.errors import (
    AppointmentConflictError,
    AppointmentNotFoundError,
    CustomerNotFoundError,
    IdentityInvariantViolation,
    InvalidStatusTransitionError,
    ServiceNotFoundError,
    StaffNotFoundError,
)
from spa_scheduler.models.appointment import Appointment
from spa_scheduler.models.customer import Customer
from spa_scheduler.models.service import Service
from spa_scheduler.models.staff import Staff
from spa_scheduler.scheduling.conflicts import booked_intervals, conflict_predicate
from spa_scheduler.scheduling.time_math import from_minutes, intervals_overlap, normalize_time, parse_time, to_minutes

logger = logging.getLogger(__name__)

# (staff_id, date) -> [lock, number of callers holding or waiting for it]
_booking_locks: dict[tuple[int, date], list] = {}
_booking_locks_guard = Lock()


def ensure_identity(customer_id, guest_email, guest_first_name, guest_last_name) -> None:
    if customer_id is not None:
        return
    if guest_email is None or guest_first_name is None or guest_last_name is None:
        raise IdentityInvariantViolation()


def compute_end_time(start_time: str, duration_minutes: int) -> str:
    return from_minutes(to_minutes(normalize_time(start_time)) + duration_minutes)


@contextmanager
def _staff_day_lock(staff_id: int, appointment_date: date):
    # Entries live only while some booking for that staff-day holds or awaits the lock.
    key = (staff_id, appointment_date)
    with _booking_locks_guard:
        entry = _booking_locks.setdefault(key, [Lock(), 0])
        entry[1] += 1
    try:
        with entry[0]:
            yield
    finally:
        with _booking_locks_guard:
            entry[1] -= 1
            if entry[1] == 0:
                del _booking_locks[key]


def _ensure_slot_free(db: Session, staff_id: int, appointment_date: date, start: int, end: int,
                      exclude_id: int | None = None) -> None:
    query = db.query(Appointment).filter(
        Appointment.staff_id == staff_id,
        Appointment.appointment_date == appointment_date,
    )
    if exclude_id is not None:
        query = query.filter(Appointment.id != exclude_id)

    appointments = query.all()
    blocks = conflict_predicate()
    for appointment, interval in zip(appointments, booked_intervals(appointments)):
        if blocks(interval.status) and intervals_overlap(start, end, interval.start, interval.end):
            raise AppointmentConflictError(staff_id, appointment.id)


def create_appointment(db: Session, data) -> Appointment:
    """Persist a new appointment in the ``scheduled`` state.

    ``data`` carries the create-appointment fields (see
    ``CreateAppointmentRequest``). The end time is derived from the service
    duration. Availability is not re-checked unless ``BOOKING_CONFLICT_GUARD``
    is on, in which case inserts are serialised per staff member and day and
    an overlapping insert raises ``AppointmentConflictError``.
    """
    ensure_identity(data.customer_id, data.guest_email, data.guest_first_name, data.guest_last_name)

    staff = db.query(Staff.id).filter(Staff.id == data.staff_id).first()
    if staff is None:
        raise StaffNotFoundError(data.staff_id)

    service = db.query(Service).filter(Service.id == data.service_id).first()
    if service is None:
        raise ServiceNotFoundError(data.service_id)

    if data.customer_id is not None:
        customer = db.query(Customer.id).filter(Customer.id == data.customer_id).first()
        if customer is None:
            raise CustomerNotFoundError(data.customer_id)

    start_time = normalize_time(data.start_time)
    end_time = compute_end_time(start_time, service.duration_minutes)

    appointment = Appointment(
        customer_id=data.customer_id,
        staff_id=data.staff_id,
        service_id=data.service_id,
        guest_email=data.guest_email,
        guest_first_name=data.guest_first_name,
        guest_last_name=data.guest_last_name,
        guest_phone=data.guest_phone,
        appointment_date=data.appointment_date,
        start_time=parse_time(start_time),
        end_time=parse_time(end_time),
        status=AppointmentStatus.SCHEDULED,
        notes=data.notes,
    )

    if config.BOOKING_CONFLICT_GUARD:
        with _staff_day_lock(data.staff_id, data.appointment_date):
            _ensure_slot_free(
                db, data.staff_id, data.appointment_date, to_minutes(start_time), to_minutes(end_time),
            )
            _persist(db, appointment)
    else:
        _persist(db, appointment)

    logger.info(
        'Booked appointment %s for staff %s on %s %s-%s',
        appointment.id, appointment.staff_id, appointment.appointment_date, start_time, end_time,
    )
    return appointment


def _persist(db: Session, appointment: Appointment) -> None:
    db.add(appointment)
    db.commit()
    db.refresh(appointment)


def get_appointment(db: Session, appointment_id: int) -> Appointment:
    appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
    if appointment is None:
        raise AppointmentNotFoundError(appointment_id)
    return appointment


def check_status_transition(current: AppointmentStatus, requested: AppointmentStatus) -> None:
    """Reject moves outside ``ALLOWED_STATUS_TRANSITIONS`` in strict mode.

    Without ``STRICT_STATUS_TRANSITIONS`` any status may overwrite any other.
    """
    current = AppointmentStatus(current)
    requested = AppointmentStatus(requested)
    if not config.STRICT_STATUS_TRANSITIONS or current == requested:
        return
    if requested not in ALLOWED_STATUS_TRANSITIONS[current]:
        raise InvalidStatusTransitionError(current, requested)


def update_appointment(db: Session, appointment_id: int, changes: dict) -> Appointment:
    """Apply a partial update; only keys present in ``changes`` are touched.

    Every new value is computed and validated before the row is modified. With
    ``BOOKING_CONFLICT_GUARD`` on, moving the date or start time is checked
    against the target day's other appointments under the same staff-day
    lock that guards inserts.
    """
    appointment = get_appointment(db, appointment_id)

    status = appointment.status
    if changes.get('status') is not None:
        check_status_transition(appointment.status, changes['status'])
        status = AppointmentStatus(changes['status'])

    appointment_date = appointment.appointment_date
    if changes.get('appointment_date') is not None:
        appointment_date = changes['appointment_date']

    start_time = normalize_time(appointment.start_time)
    end_time = normalize_time(appointment.end_time)
    if changes.get('start_time') is not None:
        service = db.query(Service).filter(Service.id == appointment.service_id).first()
        if service is None:
            raise ServiceNotFoundError(appointment.service_id)
        start_time = normalize_time(changes['start_time'])
        end_time = compute_end_time(start_time, service.duration_minutes)

    notes = changes['notes'] if 'notes' in changes else appointment.notes

    moved = (
        appointment_date != appointment.appointment_date
        or start_time != normalize_time(appointment.start_time)
    )

    def apply() -> None:
        appointment.status = status
        appointment.appointment_date = appointment_date
        appointment.start_time = parse_time(start_time)
        appointment.end_time = parse_time(end_time)
        appointment.notes = notes
        db.commit()
        db.refresh(appointment)

    if config.BOOKING_CONFLICT_GUARD and moved:
        with _staff_day_lock(appointment.staff_id, appointment_date):
            _ensure_slot_free(
                db, appointment.staff_id, appointment_date, to_minutes(start_time), to_minutes(end_time),
                exclude_id=appointment.id,
            )
            apply()
    else:
        apply()

    return appointment


def cancel_appointment(db: Session, appointment_id: int) -> Appointment:
    # Cancelling is a status change; rows are never deleted.
    appointment = get_appointment(db, appointment_id)
    check_status_transition(appointment.status, AppointmentStatus.CANCELLED)
    appointment.status = AppointmentStatus.CANCELLED
    db.commit()
    db.refresh(appointment)
    logger.info('Cancelled appointment %s', appointment.id)
    return appointment
