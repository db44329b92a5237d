import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core import config
from backend.models.appointment import Appointment
from backend.routes.common import database_unavailable, ensure_database_ready, get_db
from backend.scheduling.errors import (
    AppointmentNotFound,
    ConfigurationError,
    ConflictDetected,
    InvalidAppointment,
    SchedulingError,
)
from backend.scheduling.events import AppointmentEvent
from backend.scheduling.intervals import (
    minutes_to_label,
    minutes_to_time,
    parse_time_label,
    to_minutes,
    validate_duration,
)
from backend.scheduling.status import AppointmentStatus
from backend.services import appointment_store

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 600


def _normalize_time_label(value: str) -> str:
    return minutes_to_label(parse_time_label(value))


def _normalize_duration(value: int | None) -> int | None:
    if value is None:
        return None
    return validate_duration(value)


def _normalize_reason(value: str | None) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if len(normalized) > MAX_REASON_LENGTH:
        raise ValueError(f'Reason must be {MAX_REASON_LENGTH} characters or fewer.')

    return normalized


def _normalize_status(value: str | None) -> str | None:
    if value is None:
        return None
    return AppointmentStatus.parse(value).value


class CreateAppointmentRequest(BaseModel):
    patient_id: int
    provider_id: int
    appointment_date: date
    time: str
    duration_minutes: int | None = None
    reason: str | None = None
    status: str = AppointmentStatus.BOOKED.value

    @field_validator('time')
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _normalize_time_label(value)

    @field_validator('duration_minutes')
    @classmethod
    def validate_duration_minutes(cls, value: int | None) -> int | None:
        return _normalize_duration(value)

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        return _normalize_reason(value)

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str) -> str:
        return _normalize_status(value)


class UpdateAppointmentRequest(BaseModel):
    patient_id: int | None = None
    provider_id: int | None = None
    appointment_date: date | None = None
    time: str | None = None
    duration_minutes: int | None = None
    reason: str | None = None
    status: str | None = None

    @field_validator('time')
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _normalize_time_label(value)

    @field_validator('duration_minutes')
    @classmethod
    def validate_duration_minutes(cls, value: int | None) -> int | None:
        return _normalize_duration(value)

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        return _normalize_reason(value)

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str | None) -> str | None:
        return _normalize_status(value)

    def to_patch(self) -> dict:
        patch = {}
        for field, value in self.model_dump(exclude_unset=True).items():
            if value is None and field != 'reason':
                continue
            if field == 'time':
                patch['start_minutes'] = parse_time_label(value)
            else:
                patch[field] = value
        return patch


class UpdateAppointmentStatusRequest(BaseModel):
    status: str

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str) -> str:
        return _normalize_status(value)


class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    provider_id: int
    provider_name: str | None = None
    firstname: str | None = None
    lastname: str | None = None
    appointment_date: date
    start_time: str
    end_time: str
    duration_minutes: int
    reason: str = ''
    status: str
    status_label: str


def serialize_appointment(appointment: Appointment) -> AppointmentResponse:
    start_minutes = to_minutes(appointment.start_time)
    appointment_status = AppointmentStatus.parse(appointment.status or AppointmentStatus.BOOKED.value)

    return AppointmentResponse(
        id=appointment.id,
        patient_id=appointment.patient_id,
        provider_id=appointment.provider_id,
        provider_name=appointment.provider.name if appointment.provider else None,
        firstname=appointment.patient.firstname if appointment.patient else None,
        lastname=appointment.patient.lastname if appointment.patient else None,
        appointment_date=appointment.appointment_date,
        start_time=minutes_to_label(start_minutes),
        end_time=minutes_to_time(start_minutes + appointment.duration_minutes).strftime('%H:%M'),
        duration_minutes=appointment.duration_minutes,
        reason=appointment.reason or '',
        status=appointment_status.value,
        status_label=appointment_status.label,
    )


def scheduling_error_to_http(exc: SchedulingError) -> HTTPException:
    if isinstance(exc, ConflictDetected):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, AppointmentNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Appointment not found.')
    if isinstance(exc, InvalidAppointment):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, ConfigurationError):
        logger.error('Schedule configuration error: %s', exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def publish_event(event: AppointmentEvent) -> None:
    logger.info('%s appointment_id=%s date=%s', type(event).__name__, event.appointment_id, event.date.isoformat())


@router.get('', response_model=list[AppointmentResponse])
def list_appointments(
    appointment_date: date = Query(..., alias='date'),
    provider_id: int | None = Query(default=None),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        appointments = appointment_store.fetch_appointments(db, appointment_date, provider_id)
        return [serialize_appointment(appointment) for appointment in appointments]
    except SQLAlchemyError as exc:
        logger.exception('Failed to fetch appointments for %s.', appointment_date)
        raise database_unavailable() from exc


@router.get('/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(appointment_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return serialize_appointment(appointment_store.get_appointment(db, appointment_id))
    except SchedulingError as exc:
        raise scheduling_error_to_http(exc) from exc
    except SQLAlchemyError as exc:
        logger.exception('Failed to fetch appointment %s.', appointment_id)
        raise database_unavailable() from exc


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(data: CreateAppointmentRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    candidate = appointment_store.AppointmentCandidate(
        patient_id=data.patient_id,
        provider_id=data.provider_id,
        appointment_date=data.appointment_date,
        start_minutes=parse_time_label(data.time),
        duration_minutes=data.duration_minutes or config.DEFAULT_APPOINTMENT_DURATION_MINUTES,
        reason=data.reason or '',
        status=AppointmentStatus.parse(data.status),
    )

    try:
        appointment = appointment_store.create_appointment(db, candidate, on_event=publish_event)
        return serialize_appointment(appointment)
    except SchedulingError as exc:
        raise scheduling_error_to_http(exc) from exc
    except SQLAlchemyError as exc:
        logger.exception('Failed to create appointment.')
        raise database_unavailable() from exc


@router.put('/{appointment_id}', response_model=AppointmentResponse)
def update_appointment(appointment_id: int, data: UpdateAppointmentRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        appointment = appointment_store.update_appointment(
            db,
            appointment_id,
            data.to_patch(),
            on_event=publish_event,
        )
        return serialize_appointment(appointment)
    except SchedulingError as exc:
        raise scheduling_error_to_http(exc) from exc
    except SQLAlchemyError as exc:
        logger.exception('Failed to update appointment %s.', appointment_id)
        raise database_unavailable() from exc


@router.delete('/{appointment_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(appointment_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        appointment_store.delete_appointment(db, appointment_id, on_event=publish_event)
    except SchedulingError as exc:
        raise scheduling_error_to_http(exc) from exc
    except SQLAlchemyError as exc:
        logger.exception('Failed to delete appointment %s.', appointment_id)
        raise database_unavailable() from exc

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put('/{appointment_id}/status', response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: int,
    data: UpdateAppointmentStatusRequest,
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        appointment = appointment_store.update_appointment_status(db, appointment_id, data.status)
        return serialize_appointment(appointment)
    except SchedulingError as exc:
        raise scheduling_error_to_http(exc) from exc
    except SQLAlchemyError as exc:
        logger.exception('Failed to update status of appointment %s.', appointment_id)
        raise database_unavailable() from exc


@router.post('/{appointment_id}/status/next', response_model=AppointmentResponse)
def advance_appointment_status(appointment_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        appointment = appointment_store.advance_appointment_status(db, appointment_id)
        return serialize_appointment(appointment)
    except SchedulingError as exc:
        raise scheduling_error_to_http(exc) from exc
    except SQLAlchemyError as exc:
        logger.exception('Failed to advance status of appointment %s.', appointment_id)
        raise database_unavailable() from exc
