from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spa_scheduler.database import get_db
from spa_scheduler.models.service import Service
from spa_scheduler.routes import errors
from spa_scheduler.schemas import ServiceCreate, ServiceResponse, ServiceUpdate

router = APIRouter(tags=['services'])


@router.post('', response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
def create_service(data: ServiceCreate, db: Session = Depends(get_db)):
    try:
        service = Service(**data.model_dump())
        db.add(service)
        db.commit()
        db.refresh(service)
        return service
    except SQLAlchemyError as exc:
        db.rollback()
        raise errors.database_unavailable(exc) from exc


@router.get('', response_model=list[ServiceResponse])
def list_services(
    active_only: bool = Query(default=False),
    db: Session = Depends(get_db),
):
    try:
        query = db.query(Service)
        if active_only:
            query = query.filter(Service.is_active.is_(True))
        return query.order_by(Service.id.asc()).all()
    except SQLAlchemyError as exc:
        raise errors.database_unavailable(exc) from exc


@router.patch('/{service_id}', response_model=ServiceResponse)
def update_service(service_id: int, data: ServiceUpdate, db: Session = Depends(get_db)):
    try:
        service = db.query(Service).filter(Service.id == service_id).first()
        if service is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f'Service with ID {service_id} not found',
            )

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(service, field, value)
        db.commit()
        db.refresh(service)
        return service
    except SQLAlchemyError as exc:
        db.rollback()
        raise errors.database_unavailable(exc) from exc
