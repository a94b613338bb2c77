from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spa_scheduler.core.enums import AppointmentStatus
from spa_scheduler.core.errors import SchedulingError
from spa_scheduler.database import get_db
from spa_scheduler.models.appointment import Appointment
from spa_scheduler.routes import errors
from spa_scheduler.scheduling import availability, booking
from spa_scheduler.schemas import (
    AppointmentResponse,
    AvailableSlotResponse,
    CreateAppointmentRequest,
    UpdateAppointmentRequest,
)

router = APIRouter(tags=['appointments'])


@router.get('/slots', response_model=list[AvailableSlotResponse])
def list_available_slots(
    staff_id: int = Query(...),
    service_id: int = Query(...),
    slot_date: date = Query(..., alias='date'),
    db: Session = Depends(get_db),
):
    errors.ensure_database_ready()

    try:
        return availability.get_available_slots(db, staff_id, service_id, slot_date)
    except SchedulingError as exc:
        raise errors.to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise errors.database_unavailable(exc) from exc


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(data: CreateAppointmentRequest, db: Session = Depends(get_db)):
    errors.ensure_database_ready()

    try:
        return booking.create_appointment(db, data)
    except SchedulingError as exc:
        raise errors.to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise errors.database_unavailable(exc) from exc


@router.get('', response_model=list[AppointmentResponse])
def list_appointments(
    staff_id: int | None = Query(default=None),
    customer_id: int | None = Query(default=None),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    appointment_status: AppointmentStatus | None = Query(default=None, alias='status'),
    db: Session = Depends(get_db),
):
    if date_from is not None and date_to is not None and date_from > date_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='date_from must not be after date_to.',
        )

    errors.ensure_database_ready()

    try:
        query = db.query(Appointment)
        if staff_id is not None:
            query = query.filter(Appointment.staff_id == staff_id)
        if customer_id is not None:
            query = query.filter(Appointment.customer_id == customer_id)
        if date_from is not None:
            query = query.filter(Appointment.appointment_date >= date_from)
        if date_to is not None:
            query = query.filter(Appointment.appointment_date <= date_to)
        if appointment_status is not None:
            query = query.filter(Appointment.status == appointment_status)

        return query.order_by(Appointment.appointment_date.asc(), Appointment.start_time.asc()).all()
    except SQLAlchemyError as exc:
        raise errors.database_unavailable(exc) from exc


@router.patch('/{appointment_id}', response_model=AppointmentResponse)
def update_appointment(appointment_id: int, data: UpdateAppointmentRequest, db: Session = Depends(get_db)):
    errors.ensure_database_ready()

    try:
        return booking.update_appointment(db, appointment_id, data.model_dump(exclude_unset=True))
    except SchedulingError as exc:
        db.rollback()
        raise errors.to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise errors.database_unavailable(exc) from exc


@router.post('/{appointment_id}/cancel', response_model=AppointmentResponse)
def cancel_appointment(appointment_id: int, db: Session = Depends(get_db)):
    errors.ensure_database_ready()

    try:
        return booking.cancel_appointment(db, appointment_id)
    except SchedulingError as exc:
        raise errors.to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise errors.database_unavailable(exc) from exc
