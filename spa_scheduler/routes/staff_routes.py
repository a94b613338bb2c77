from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from spa_scheduler.database import get_db
from spa_scheduler.models.availability import StaffAvailability
from spa_scheduler.models.service import Service
from spa_scheduler.models.staff import Staff, StaffService
from spa_scheduler.routes import errors
from spa_scheduler.scheduling.time_math import parse_time
from spa_scheduler.schemas import (
    ServiceResponse,
    StaffAvailabilityCreate,
    StaffAvailabilityResponse,
    StaffCreate,
    StaffResponse,
    StaffServiceResponse,
    StaffUpdate,
)

router = APIRouter(tags=['staff'])


def get_staff_or_404(db: Session, staff_id: int) -> Staff:
    staff = db.query(Staff).filter(Staff.id == staff_id).first()
    if staff is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f'Staff with ID {staff_id} not found',
        )
    return staff


@router.post('', response_model=StaffResponse, status_code=status.HTTP_201_CREATED)
def create_staff(data: StaffCreate, db: Session = Depends(get_db)):
    try:
        staff = Staff(**data.model_dump())
        db.add(staff)
        db.commit()
        db.refresh(staff)
        return staff
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail='A staff member with this email already exists.',
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise errors.database_unavailable(exc) from exc


@router.get('', response_model=list[StaffResponse])
def list_staff(db: Session = Depends(get_db)):
    try:
        return db.query(Staff).order_by(Staff.id.asc()).all()
    except SQLAlchemyError as exc:
        raise errors.database_unavailable(exc) from exc


@router.patch('/{staff_id}', response_model=StaffResponse)
def update_staff(staff_id: int, data: StaffUpdate, db: Session = Depends(get_db)):
    try:
        staff = get_staff_or_404(db, staff_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(staff, field, value)
        db.commit()
        db.refresh(staff)
        return staff
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail='A staff member with this email already exists.',
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise errors.database_unavailable(exc) from exc


@router.post(
    '/{staff_id}/availability',
    response_model=StaffAvailabilityResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_staff_availability(staff_id: int, data: StaffAvailabilityCreate, db: Session = Depends(get_db)):
    try:
        get_staff_or_404(db, staff_id)

        window = StaffAvailability(
            staff_id=staff_id,
            day_of_week=data.day_of_week,
            start_time=parse_time(data.start_time),
            end_time=parse_time(data.end_time),
        )
        db.add(window)
        db.commit()
        db.refresh(window)
        return window
    except SQLAlchemyError as exc:
        db.rollback()
        raise errors.database_unavailable(exc) from exc


@router.get('/{staff_id}/availability', response_model=list[StaffAvailabilityResponse])
def list_staff_availability(staff_id: int, db: Session = Depends(get_db)):
    try:
        return db.query(StaffAvailability).filter(
            StaffAvailability.staff_id == staff_id,
        ).order_by(StaffAvailability.id.asc()).all()
    except SQLAlchemyError as exc:
        raise errors.database_unavailable(exc) from exc


@router.post(
    '/{staff_id}/services/{service_id}',
    response_model=StaffServiceResponse,
    status_code=status.HTTP_201_CREATED,
)
def assign_service_to_staff(staff_id: int, service_id: int, db: Session = Depends(get_db)):
    try:
        get_staff_or_404(db, staff_id)

        service = db.query(Service.id).filter(Service.id == service_id).first()
        if service is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f'Service with ID {service_id} not found',
            )

        assignment = StaffService(staff_id=staff_id, service_id=service_id)
        db.add(assignment)
        db.commit()
        db.refresh(assignment)
        return assignment
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail='This service is already assigned to the staff member.',
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise errors.database_unavailable(exc) from exc


@router.get('/{staff_id}/services', response_model=list[ServiceResponse])
def list_staff_services(staff_id: int, db: Session = Depends(get_db)):
    try:
        return db.query(Service).join(
            StaffService, StaffService.service_id == Service.id,
        ).filter(
            StaffService.staff_id == staff_id,
        ).order_by(Service.id.asc()).all()
    except SQLAlchemyError as exc:
        raise errors.database_unavailable(exc) from exc
