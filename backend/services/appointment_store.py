"""Appointment persistence with conflict checking inside the write transaction.

Create and update lock the provider's ``doctors`` row before reading that
day's bookings, so two writers for one provider are serialized between the
conflict check and the commit. SQLite ignores ``FOR UPDATE``; there the check
still runs in the same transaction as the write.
"""

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session, joinedload

from backend.models.appointment import Appointment
from backend.models.doctor import Doctor
from backend.models.patient import Patient
from backend.scheduling.conflicts import BookedInterval, find_conflict
from backend.scheduling.errors import AppointmentNotFound, ConflictDetected, InvalidAppointment
from backend.scheduling.events import (
    AppointmentCreated,
    AppointmentDeleted,
    AppointmentUpdated,
    EventListener,
)
from backend.scheduling.intervals import (
    minutes_to_label,
    minutes_to_time,
    round_to_nearest_five,
    to_minutes,
    validate_duration,
)
from backend.scheduling.status import AppointmentStatus

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    'patient_id',
    'provider_id',
    'appointment_date',
    'start_minutes',
    'duration_minutes',
    'reason',
    'status',
}
TIME_RANGE_FIELDS = {'provider_id', 'appointment_date', 'start_minutes', 'duration_minutes'}


@dataclass(frozen=True)
class AppointmentCandidate:
    patient_id: int
    provider_id: int
    appointment_date: date
    start_minutes: int
    duration_minutes: int
    reason: str = ''
    status: AppointmentStatus = AppointmentStatus.BOOKED


def fetch_appointments(db: Session, appointment_date: date, provider_id: int | None = None) -> list[Appointment]:
    query = db.query(Appointment).options(
        joinedload(Appointment.patient),
        joinedload(Appointment.provider),
    ).filter(Appointment.appointment_date == appointment_date)

    if provider_id is not None:
        query = query.filter(Appointment.provider_id == provider_id)

    return query.order_by(Appointment.start_time.asc(), Appointment.id.asc()).all()


def get_appointment(db: Session, appointment_id: int) -> Appointment:
    appointment = db.query(Appointment).options(
        joinedload(Appointment.patient),
        joinedload(Appointment.provider),
    ).filter(Appointment.id == appointment_id).first()

    if appointment is None:
        raise AppointmentNotFound(appointment_id)

    return appointment


def _normalize_start(start_minutes: int) -> int:
    return round_to_nearest_five(to_minutes(start_minutes))


def _require_patient(db: Session, patient_id: int) -> None:
    if db.query(Patient.id).filter(Patient.id == patient_id).first() is None:
        raise InvalidAppointment(f'Patient {patient_id} does not exist.')


def _lock_provider(db: Session, provider_id: int) -> Doctor:
    provider = db.query(Doctor).filter(Doctor.id == provider_id).with_for_update().first()
    if provider is None:
        raise InvalidAppointment(f'Provider {provider_id} does not exist.')
    return provider


def _ensure_no_conflict(
    db: Session,
    provider_id: int,
    appointment_date: date,
    start_minutes: int,
    duration_minutes: int,
    exclude_id: int | None = None,
) -> None:
    existing = [
        BookedInterval.from_appointment(appointment)
        for appointment in fetch_appointments(db, appointment_date, provider_id)
    ]
    conflict = find_conflict(start_minutes, duration_minutes, existing, exclude_id=exclude_id)
    if conflict is not None:
        logger.warning(
            'Rejected %s+%dmin for provider %s on %s: overlaps appointment %s.',
            minutes_to_label(start_minutes),
            duration_minutes,
            provider_id,
            appointment_date.isoformat(),
            conflict.id,
        )
        raise ConflictDetected(conflict.id)


def create_appointment(
    db: Session,
    candidate: AppointmentCandidate,
    on_event: EventListener | None = None,
) -> Appointment:
    start_minutes = _normalize_start(candidate.start_minutes)
    duration_minutes = validate_duration(candidate.duration_minutes)
    status = AppointmentStatus.parse(candidate.status)

    try:
        _require_patient(db, candidate.patient_id)
        _lock_provider(db, candidate.provider_id)
        _ensure_no_conflict(
            db,
            candidate.provider_id,
            candidate.appointment_date,
            start_minutes,
            duration_minutes,
        )

        appointment = Appointment(
            patient_id=candidate.patient_id,
            provider_id=candidate.provider_id,
            appointment_date=candidate.appointment_date,
            start_time=minutes_to_time(start_minutes),
            duration_minutes=duration_minutes,
            reason=candidate.reason or '',
            status=status.value,
        )
        db.add(appointment)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(appointment)
    logger.info(
        'Booked appointment %s for provider %s on %s at %s.',
        appointment.id,
        appointment.provider_id,
        appointment.appointment_date.isoformat(),
        minutes_to_label(start_minutes),
    )
    if on_event is not None:
        on_event(AppointmentCreated(appointment_id=appointment.id, date=appointment.appointment_date))
    return appointment


def update_appointment(
    db: Session,
    appointment_id: int,
    patch: dict,
    on_event: EventListener | None = None,
) -> Appointment:
    """Apply a partial update, re-checking conflicts when the time range moves.

    ``patch`` uses the keys in ``UPDATABLE_FIELDS``. A patch touching the
    provider, date, start or duration is checked against that provider's day
    with the appointment itself excluded.
    """
    unknown = set(patch) - UPDATABLE_FIELDS
    if unknown:
        raise InvalidAppointment(f'Cannot update field(s): {", ".join(sorted(unknown))}.')
    if not patch:
        raise InvalidAppointment('Nothing to update.')

    changes = dict(patch)
    if 'start_minutes' in changes:
        changes['start_minutes'] = _normalize_start(changes['start_minutes'])
    if 'duration_minutes' in changes:
        validate_duration(changes['duration_minutes'])
    if 'status' in changes:
        changes['status'] = AppointmentStatus.parse(changes['status']).value

    try:
        appointment = get_appointment(db, appointment_id)

        if 'patient_id' in changes:
            _require_patient(db, changes['patient_id'])

        if TIME_RANGE_FIELDS & changes.keys():
            provider_id = changes.get('provider_id', appointment.provider_id)
            _lock_provider(db, provider_id)
            _ensure_no_conflict(
                db,
                provider_id,
                changes.get('appointment_date', appointment.appointment_date),
                changes.get('start_minutes', to_minutes(appointment.start_time)),
                changes.get('duration_minutes', appointment.duration_minutes),
                exclude_id=appointment.id,
            )

        if 'start_minutes' in changes:
            appointment.start_time = minutes_to_time(changes.pop('start_minutes'))
        if 'reason' in changes:
            changes['reason'] = changes['reason'] or ''
        for field, value in changes.items():
            setattr(appointment, field, value)

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(appointment)
    logger.info('Updated appointment %s.', appointment.id)
    if on_event is not None:
        on_event(AppointmentUpdated(appointment_id=appointment.id, date=appointment.appointment_date))
    return appointment


def delete_appointment(
    db: Session,
    appointment_id: int,
    on_event: EventListener | None = None,
) -> None:
    try:
        appointment = get_appointment(db, appointment_id)
        appointment_date = appointment.appointment_date
        db.delete(appointment)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info('Deleted appointment %s.', appointment_id)
    if on_event is not None:
        on_event(AppointmentDeleted(appointment_id=appointment_id, date=appointment_date))


def update_appointment_status(db: Session, appointment_id: int, new_status) -> Appointment:
    status = AppointmentStatus.parse(new_status)

    try:
        appointment = get_appointment(db, appointment_id)
        appointment.status = status.value
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(appointment)
    logger.info('Appointment %s status set to %s.', appointment_id, status.value)
    return appointment


def advance_appointment_status(db: Session, appointment_id: int) -> Appointment:
    appointment = get_appointment(db, appointment_id)
    next_status = AppointmentStatus.parse(appointment.status).next()
    return update_appointment_status(db, appointment_id, next_status)
