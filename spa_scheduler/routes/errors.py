import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from spa_scheduler.core.errors import (
    AppointmentConflictError,
    IdentityInvariantViolation,
    InvalidStatusTransitionError,
    MalformedTimeError,
    NotFoundError,
    SchedulingError,
    StaffServiceMismatchError,
    UnsupportedTimeRangeError,
)
from spa_scheduler.database import ensure_appointment_schema

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'

_STATUS_CODES = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (StaffServiceMismatchError, status.HTTP_400_BAD_REQUEST),
    (MalformedTimeError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (UnsupportedTimeRangeError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (IdentityInvariantViolation, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (AppointmentConflictError, status.HTTP_409_CONFLICT),
    (InvalidStatusTransitionError, status.HTTP_409_CONFLICT),
)


def to_http_exception(exc: SchedulingError) -> HTTPException:
    for error_type, status_code in _STATUS_CODES:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def database_unavailable(exc: SQLAlchemyError) -> HTTPException:
    logger.exception('Database operation failed: %s', exc)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_UNAVAILABLE_DETAIL,
    )


def ensure_database_ready() -> None:
    try:
        ensure_appointment_schema()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc
