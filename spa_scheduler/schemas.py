from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from spa_scheduler.core.enums import AppointmentStatus, DayOfWeek, StaffRole
from spa_scheduler.scheduling.booking import ensure_identity
from spa_scheduler.scheduling.time_math import TIME_PATTERN, normalize_time

MAX_APPOINTMENT_NOTES_LENGTH = 600


def _normalize_email(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip().lower()
    if not normalized:
        return None
    if '@' not in normalized:
        raise ValueError('Invalid email address.')
    return normalized


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


class _TimeOfDayResponse(BaseModel):
    @field_validator('start_time', 'end_time', mode='before', check_fields=False)
    @classmethod
    def render_time(cls, value):
        return normalize_time(value)


class CustomerCreate(BaseModel):
    email: str
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    phone: str | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = _normalize_email(value)
        if normalized is None:
            raise ValueError('Email is required.')
        return normalized


class CustomerResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    phone: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StaffCreate(CustomerCreate):
    role: StaffRole = StaffRole.STAFF


class StaffUpdate(BaseModel):
    email: str | None = None
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    phone: str | None = None
    role: StaffRole | None = None
    is_active: bool | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        return _normalize_email(value)


class StaffResponse(CustomerResponse):
    role: StaffRole
    is_active: bool


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str | None = None
    duration_minutes: int = Field(gt=0)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)


class ServiceUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    duration_minutes: int | None = Field(default=None, gt=0)
    price: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    is_active: bool | None = None


class ServiceResponse(BaseModel):
    id: int
    name: str
    description: str | None = None
    duration_minutes: int
    price: float
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StaffAvailabilityCreate(BaseModel):
    day_of_week: DayOfWeek
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)

    @model_validator(mode='after')
    def validate_window(self) -> 'StaffAvailabilityCreate':
        # HH:MM strings compare the same way as the times they encode.
        if self.start_time >= self.end_time:
            raise ValueError('start_time must be before end_time.')
        return self


class StaffAvailabilityResponse(_TimeOfDayResponse):
    id: int
    staff_id: int
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StaffServiceResponse(BaseModel):
    id: int
    staff_id: int
    service_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class AvailableSlotResponse(BaseModel):
    start_time: str
    end_time: str


class CreateAppointmentRequest(BaseModel):
    customer_id: int | None = None
    staff_id: int
    service_id: int
    guest_email: str | None = None
    guest_first_name: str | None = None
    guest_last_name: str | None = None
    guest_phone: str | None = None
    appointment_date: date
    start_time: str = Field(pattern=TIME_PATTERN)
    notes: str | None = None

    @field_validator('guest_email')
    @classmethod
    def validate_guest_email(cls, value: str | None) -> str | None:
        return _normalize_email(value)

    @field_validator('guest_first_name', 'guest_last_name', 'guest_phone')
    @classmethod
    def validate_guest_names(cls, value: str | None) -> str | None:
        return _blank_to_none(value)

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        normalized = _blank_to_none(value)
        if normalized is not None and len(normalized) > MAX_APPOINTMENT_NOTES_LENGTH:
            raise ValueError(f'Notes must be {MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')
        return normalized

    @model_validator(mode='after')
    def validate_identity(self) -> 'CreateAppointmentRequest':
        ensure_identity(self.customer_id, self.guest_email, self.guest_first_name, self.guest_last_name)
        return self


class UpdateAppointmentRequest(BaseModel):
    appointment_date: date | None = None
    start_time: str | None = Field(default=None, pattern=TIME_PATTERN)
    status: AppointmentStatus | None = None
    notes: str | None = None

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        normalized = _blank_to_none(value)
        if normalized is not None and len(normalized) > MAX_APPOINTMENT_NOTES_LENGTH:
            raise ValueError(f'Notes must be {MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')
        return normalized


class AppointmentResponse(_TimeOfDayResponse):
    id: int
    customer_id: int | None = None
    staff_id: int
    service_id: int
    guest_email: str | None = None
    guest_first_name: str | None = None
    guest_last_name: str | None = None
    guest_phone: str | None = None
    appointment_date: date
    start_time: str
    end_time: str
    status: AppointmentStatus
    notes: str | None = None
    confirmation_sent: bool
    reminder_24h_sent: bool
    reminder_1h_sent: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AppointmentStatsResponse(BaseModel):
    total_appointments: int
    completed_appointments: int
    cancelled_appointments: int
    revenue: float
