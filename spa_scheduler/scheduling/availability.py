import logging
from datetime import date

from sqlalchemy.orm import Session

from spa_scheduler.core import config
from spa_scheduler.core.errors import ServiceNotFoundError, StaffServiceMismatchError
from spa_scheduler.models.appointment import Appointment
from spa_scheduler.models.availability import StaffAvailability
from spa_scheduler.models.service import Service
from spa_scheduler.models.staff import StaffService
from spa_scheduler.scheduling.conflicts import booked_intervals, conflict_predicate, filter_conflicts
from spa_scheduler.scheduling.slots import generate_slots
from spa_scheduler.scheduling.time_math import from_minutes
from spa_scheduler.scheduling.weekly_index import windows_for_date

logger = logging.getLogger(__name__)


def get_service(db: Session, service_id: int) -> Service:
    service = db.query(Service).filter(Service.id == service_id).first()
    if service is None:
        raise ServiceNotFoundError(service_id)
    return service


def ensure_staff_provides_service(db: Session, staff_id: int, service_id: int) -> None:
    capability = db.query(StaffService.id).filter(
        StaffService.staff_id == staff_id,
        StaffService.service_id == service_id,
    ).first()
    if capability is None:
        raise StaffServiceMismatchError(staff_id, service_id)


def get_available_slots(db: Session, staff_id: int, service_id: int, target_date: date) -> list[dict]:
    """Compute the bookable slots for one staff member, service and day.

    Validation runs in a fixed order: the service must exist, then the staff
    member must be authorized for it. Staff existence itself is not checked;
    an unknown staff id simply has no capability rows.

    Every appointment on the day blocks its interval whatever its status,
    unless ``SLOT_CONFLICT_IGNORES_CANCELLED`` swaps in the predicate that
    frees cancelled bookings. Reads only.
    """
    service = get_service(db, service_id)
    ensure_staff_provides_service(db, staff_id, service_id)

    windows = db.query(StaffAvailability).filter(
        StaffAvailability.staff_id == staff_id,
    ).order_by(StaffAvailability.id.asc()).all()

    day_windows = windows_for_date(windows, target_date)
    if not day_windows:
        return []

    candidates = generate_slots(day_windows, service.duration_minutes, config.SLOT_GRANULARITY_MINUTES)

    appointments = db.query(Appointment).filter(
        Appointment.staff_id == staff_id,
        Appointment.appointment_date == target_date,
    ).order_by(Appointment.id.asc()).all()

    available = filter_conflicts(candidates, booked_intervals(appointments), conflict_predicate())

    logger.debug(
        'Computed %d of %d candidate slots for staff %s, service %s on %s',
        len(available), len(candidates), staff_id, service_id, target_date,
    )

    return [
        {'start_time': from_minutes(slot.start), 'end_time': from_minutes(slot.end)}
        for slot in available
    ]
