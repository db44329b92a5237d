"""Appointment status cycle."""

from enum import Enum

from backend.scheduling.errors import InvalidAppointment


class AppointmentStatus(str, Enum):
    """Front-desk progress of an appointment, in click order."""

    BOOKED = 'booked'
    PRESENT = 'present'
    BEING_SEEN = 'being_seen'
    FINISHED = 'finished'
    MISSED = 'missed'

    def next(self) -> 'AppointmentStatus':
        ordered = list(AppointmentStatus)
        return ordered[(ordered.index(self) + 1) % len(ordered)]

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @classmethod
    def parse(cls, value: str) -> 'AppointmentStatus':
        normalized = (value or '').strip().lower()
        try:
            return cls(normalized)
        except ValueError as exc:
            raise InvalidAppointment(f'Invalid appointment status {value!r}.') from exc


STATUS_LABELS = {
    AppointmentStatus.BOOKED: 'To Do',
    AppointmentStatus.PRESENT: 'Here',
    AppointmentStatus.BEING_SEEN: 'In Room',
    AppointmentStatus.FINISHED: 'Billed',
    AppointmentStatus.MISSED: 'No Show',
}
