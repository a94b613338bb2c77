from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from spa_scheduler.database import get_db
from spa_scheduler.models.customer import Customer
from spa_scheduler.routes import errors
from spa_scheduler.schemas import CustomerCreate, CustomerResponse

router = APIRouter(tags=['customers'])


@router.post('', response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(data: CustomerCreate, db: Session = Depends(get_db)):
    try:
        customer = Customer(**data.model_dump())
        db.add(customer)
        db.commit()
        db.refresh(customer)
        return customer
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail='A customer with this email already exists.',
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise errors.database_unavailable(exc) from exc


@router.get('', response_model=list[CustomerResponse])
def list_customers(db: Session = Depends(get_db)):
    try:
        return db.query(Customer).order_by(Customer.id.asc()).all()
    except SQLAlchemyError as exc:
        raise errors.database_unavailable(exc) from exc
