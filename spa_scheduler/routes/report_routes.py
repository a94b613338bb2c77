from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spa_scheduler.core.enums import AppointmentStatus
from spa_scheduler.database import get_db
from spa_scheduler.models.appointment import Appointment
from spa_scheduler.models.service import Service
from spa_scheduler.routes import errors
from spa_scheduler.schemas import AppointmentStatsResponse

router = APIRouter(tags=['reports'])


def _appointment_filters(staff_id: int | None, date_from: date | None, date_to: date | None) -> list:
    conditions = []
    if staff_id is not None:
        conditions.append(Appointment.staff_id == staff_id)
    if date_from is not None:
        conditions.append(Appointment.appointment_date >= date_from)
    if date_to is not None:
        conditions.append(Appointment.appointment_date <= date_to)
    return conditions


@router.get('/appointment-stats', response_model=AppointmentStatsResponse)
def get_appointment_stats(
    staff_id: int | None = Query(default=None),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    db: Session = Depends(get_db),
):
    conditions = _appointment_filters(staff_id, date_from, date_to)

    try:
        total = db.query(func.count(Appointment.id)).filter(*conditions).scalar()
        completed = db.query(func.count(Appointment.id)).filter(
            *conditions, Appointment.status == AppointmentStatus.COMPLETED,
        ).scalar()
        cancelled = db.query(func.count(Appointment.id)).filter(
            *conditions, Appointment.status == AppointmentStatus.CANCELLED,
        ).scalar()
        # Revenue counts completed appointments only.
        revenue = db.query(func.sum(Service.price)).select_from(Appointment).join(
            Service, Appointment.service_id == Service.id,
        ).filter(
            *conditions, Appointment.status == AppointmentStatus.COMPLETED,
        ).scalar()

        return AppointmentStatsResponse(
            total_appointments=total or 0,
            completed_appointments=completed or 0,
            cancelled_appointments=cancelled or 0,
            revenue=float(revenue) if revenue is not None else 0.0,
        )
    except SQLAlchemyError as exc:
        raise errors.database_unavailable(exc) from exc
