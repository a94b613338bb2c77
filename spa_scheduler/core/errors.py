"""Scheduling error taxonomy.

Every error is terminal for the operation that raised it. The HTTP layer maps
them onto status codes in ``spa_scheduler.routes.errors``.
"""


class SchedulingError(Exception):
    """Base class for all booking and availability failures."""


class NotFoundError(SchedulingError):
    entity = 'Record'

    def __init__(self, entity_id: int):
        self.entity_id = entity_id
        super().__init__(f'{self.entity} with ID {entity_id} not found')


class ServiceNotFoundError(NotFoundError):
    entity = 'Service'


class StaffNotFoundError(NotFoundError):
    entity = 'Staff'


class CustomerNotFoundError(NotFoundError):
    entity = 'Customer'


class AppointmentNotFoundError(NotFoundError):
    entity = 'Appointment'


class StaffServiceMismatchError(SchedulingError):
    def __init__(self, staff_id: int, service_id: int):
        self.staff_id = staff_id
        self.service_id = service_id
        super().__init__('Staff member cannot provide this service')


class MalformedTimeError(SchedulingError):
    def __init__(self, value):
        self.value = value
        super().__init__(f'Invalid time of day {value!r}, expected HH:MM')


class UnsupportedTimeRangeError(SchedulingError):
    """A computed time falls outside the day, e.g. an appointment crossing midnight."""

    def __init__(self, minutes: int):
        self.minutes = minutes
        super().__init__('Appointments crossing midnight are not supported')


class IdentityInvariantViolation(SchedulingError, ValueError):
    def __init__(self):
        super().__init__(
            'Either customer_id must be provided or guest details '
            '(email, first_name, last_name) must be provided'
        )


class AppointmentConflictError(SchedulingError):
    def __init__(self, staff_id: int, appointment_id: int):
        self.staff_id = staff_id
        self.appointment_id = appointment_id
        super().__init__('This time is already booked.')


class InvalidStatusTransitionError(SchedulingError):
    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(f'Cannot move an appointment from {current.value} to {requested.value}')
