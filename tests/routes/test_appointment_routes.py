from datetime import date, time

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from spa_scheduler.core.enums import AppointmentStatus
from spa_scheduler.routes.appointment_routes import (
    cancel_appointment,
    create_appointment,
    list_appointments,
    list_available_slots,
    update_appointment,
)
from spa_scheduler.schemas import AppointmentResponse, CreateAppointmentRequest, UpdateAppointmentRequest

MONDAY = date(2026, 1, 5)


@pytest.fixture(autouse=True)
def skip_schema_migration(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('spa_scheduler.routes.errors.ensure_database_ready', lambda: None)


def test_create_appointment_request_requires_customer_or_guest_details() -> None:
    with pytest.raises(ValidationError) as exception_info:
        CreateAppointmentRequest(
            staff_id=1,
            service_id=1,
            appointment_date=MONDAY,
            start_time='09:00',
        )

    assert 'guest details' in str(exception_info.value)


def test_create_appointment_request_treats_blank_guest_fields_as_missing() -> None:
    with pytest.raises(ValidationError):
        CreateAppointmentRequest(
            staff_id=1,
            service_id=1,
            guest_email=' GUEST@EXAMPLE.COM ',
            guest_first_name='   ',
            guest_last_name='Guest',
            appointment_date=MONDAY,
            start_time='09:00',
        )


def test_create_appointment_request_normalizes_guest_email() -> None:
    request = CreateAppointmentRequest(
        staff_id=1,
        service_id=1,
        guest_email=' GUEST@EXAMPLE.COM ',
        guest_first_name='Sam',
        guest_last_name='Guest',
        appointment_date=MONDAY,
        start_time='09:00',
    )

    assert request.guest_email == 'guest@example.com'


@pytest.mark.parametrize('start_time', ['9:00', '24:00', '09:60', '09:00:00'])
def test_create_appointment_request_rejects_malformed_start_time(start_time: str) -> None:
    with pytest.raises(ValidationError):
        CreateAppointmentRequest(customer_id=1, staff_id=1, service_id=1, appointment_date=MONDAY, start_time=start_time)


def test_list_available_slots_returns_hh_mm_pairs(db, monday_massage) -> None:
    staff, service = monday_massage

    slots = list_available_slots(staff_id=staff.id, service_id=service.id, slot_date=MONDAY, db=db)

    assert slots[0] == {'start_time': '09:00', 'end_time': '10:00'}
    assert slots[-1] == {'start_time': '11:00', 'end_time': '12:00'}


def test_list_available_slots_maps_mismatch_to_bad_request(db, seed) -> None:
    staff = seed.staff()
    service = seed.service()

    with pytest.raises(HTTPException) as exception_info:
        list_available_slots(staff_id=staff.id, service_id=service.id, slot_date=MONDAY, db=db)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Staff member cannot provide this service'


def test_list_available_slots_maps_missing_service_to_not_found(db, seed) -> None:
    staff = seed.staff()

    with pytest.raises(HTTPException) as exception_info:
        list_available_slots(staff_id=staff.id, service_id=999, slot_date=MONDAY, db=db)

    assert exception_info.value.status_code == 404


def test_create_appointment_route_books_guest_and_renders_times(db, seed) -> None:
    staff = seed.staff()
    service = seed.service(duration_minutes=90)
    request = CreateAppointmentRequest(
        staff_id=staff.id,
        service_id=service.id,
        guest_email='guest@example.com',
        guest_first_name='Sam',
        guest_last_name='Guest',
        appointment_date=MONDAY,
        start_time='09:15',
    )

    appointment = create_appointment(request, db=db)
    response = AppointmentResponse.model_validate(appointment)

    assert response.start_time == '09:15'
    assert response.end_time == '10:45'
    assert response.status == AppointmentStatus.SCHEDULED


def test_create_appointment_route_maps_unknown_staff_to_not_found(db, seed) -> None:
    service = seed.service()
    request = CreateAppointmentRequest(
        staff_id=404,
        service_id=service.id,
        guest_email='guest@example.com',
        guest_first_name='Sam',
        guest_last_name='Guest',
        appointment_date=MONDAY,
        start_time='09:00',
    )

    with pytest.raises(HTTPException) as exception_info:
        create_appointment(request, db=db)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Staff with ID 404 not found'


def test_create_appointment_route_rejects_midnight_crossing(db, seed) -> None:
    staff = seed.staff()
    service = seed.service(duration_minutes=60)
    request = CreateAppointmentRequest(
        staff_id=staff.id,
        service_id=service.id,
        guest_email='guest@example.com',
        guest_first_name='Sam',
        guest_last_name='Guest',
        appointment_date=MONDAY,
        start_time='23:30',
    )

    with pytest.raises(HTTPException) as exception_info:
        create_appointment(request, db=db)

    assert exception_info.value.status_code == 422


def test_list_appointments_applies_filters(db, seed) -> None:
    staff = seed.staff()
    colleague = seed.staff()
    service = seed.service()
    kept = seed.appointment(staff, service, time(9, 0), time(10, 0), status=AppointmentStatus.CONFIRMED)
    seed.appointment(staff, service, time(11, 0), time(12, 0), status=AppointmentStatus.CANCELLED)
    seed.appointment(colleague, service, time(9, 0), time(10, 0), status=AppointmentStatus.CONFIRMED)
    seed.appointment(staff, service, time(9, 0), time(10, 0), appointment_date=date(2026, 2, 2),
                     status=AppointmentStatus.CONFIRMED)

    appointments = list_appointments(
        staff_id=staff.id,
        customer_id=None,
        date_from=date(2026, 1, 1),
        date_to=date(2026, 1, 31),
        appointment_status=AppointmentStatus.CONFIRMED,
        db=db,
    )

    assert [appointment.id for appointment in appointments] == [kept.id]


def test_list_appointments_rejects_inverted_date_range(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        list_appointments(
            staff_id=None,
            customer_id=None,
            date_from=date(2026, 2, 1),
            date_to=date(2026, 1, 1),
            appointment_status=None,
            db=db,
        )

    assert exception_info.value.status_code == 400


def test_update_appointment_route_changes_status(db, seed) -> None:
    staff = seed.staff()
    service = seed.service()
    appointment = seed.appointment(staff, service, time(9, 0), time(10, 0))

    updated = update_appointment(
        appointment.id,
        UpdateAppointmentRequest(status=AppointmentStatus.CONFIRMED),
        db=db,
    )

    assert updated.status == AppointmentStatus.CONFIRMED
    assert updated.start_time == time(9, 0)


def test_update_appointment_route_maps_strict_transition_failure_to_conflict(
    db, seed, monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr('spa_scheduler.core.config.STRICT_STATUS_TRANSITIONS', True)
    staff = seed.staff()
    service = seed.service()
    appointment = seed.appointment(staff, service, time(9, 0), time(10, 0), status=AppointmentStatus.COMPLETED)

    with pytest.raises(HTTPException) as exception_info:
        update_appointment(
            appointment.id,
            UpdateAppointmentRequest(status=AppointmentStatus.SCHEDULED),
            db=db,
        )

    assert exception_info.value.status_code == 409


def test_cancel_appointment_route_returns_not_found_when_missing(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        cancel_appointment(appointment_id=999, db=db)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Appointment with ID 999 not found'


def test_cancel_appointment_reopens_slot_only_when_configured(
    db, seed, monday_massage, monkeypatch: pytest.MonkeyPatch,
) -> None:
    staff, service = monday_massage
    appointment = seed.appointment(staff, service, time(9, 0), time(10, 0))

    cancel_appointment(appointment_id=appointment.id, db=db)

    slots = list_available_slots(staff_id=staff.id, service_id=service.id, slot_date=MONDAY, db=db)
    assert {'start_time': '09:00', 'end_time': '10:00'} not in slots

    monkeypatch.setattr('spa_scheduler.core.config.SLOT_CONFLICT_IGNORES_CANCELLED', True)

    slots = list_available_slots(staff_id=staff.id, service_id=service.id, slot_date=MONDAY, db=db)
    assert {'start_time': '09:00', 'end_time': '10:00'} in slots
