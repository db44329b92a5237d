"""Errors raised by the scheduling core and the appointment store."""


class SchedulingError(Exception):
    """Base class for scheduling failures."""


class InvalidAppointment(SchedulingError, ValueError):
    """Appointment input failed validation."""


class InvalidDuration(InvalidAppointment):
    """Duration is zero, negative or not a whole number of minutes."""


class InvalidTime(InvalidAppointment):
    """Time value is malformed or out of range."""


class ConflictDetected(SchedulingError):
    """Candidate appointment overlaps an existing booking for the provider."""

    def __init__(self, conflicting_id=None):
        self.conflicting_id = conflicting_id
        message = 'This time slot is already booked for the selected provider.'
        super().__init__(message)


class ConfigurationError(SchedulingError):
    """Day grid step or range is misconfigured."""


class AppointmentNotFound(SchedulingError, LookupError):
    def __init__(self, appointment_id):
        self.appointment_id = appointment_id
        super().__init__(f'Appointment {appointment_id} not found.')
