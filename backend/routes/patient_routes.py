import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.models.patient import Patient
from backend.routes.common import database_unavailable, ensure_database_ready, get_db

router = APIRouter(tags=['patients'])

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 50
PATIENT_STATUSES = {'active', 'not enrolled'}


class PatientFields(BaseModel):
    lastname: str | None = None
    firstname: str | None = None
    preferredname: str | None = None
    address: str | None = None
    city: str | None = None
    postalcode: str | None = None
    province: str | None = None
    homephone: str | None = None
    workphone: str | None = None
    cellphone: str | None = None
    email: str | None = None
    dob: date | None = None
    sex: str | None = None
    healthinsurance_number: str | None = None
    healthinsurance_version_code: str | None = None
    patient_status: str | None = None
    family_physician: str | None = None

    @field_validator('patient_status')
    @classmethod
    def validate_patient_status(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip().lower()
        if normalized not in PATIENT_STATUSES:
            raise ValueError('Patient status must be "active" or "not enrolled".')

        return normalized


class CreatePatientRequest(PatientFields):
    lastname: str
    firstname: str

    @field_validator('lastname', 'firstname')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('First and last name are required.')
        return normalized


class UpdatePatientRequest(PatientFields):
    pass


class PatientResponse(PatientFields):
    id: int

    class Config:
        from_attributes = True


class PatientCreatedResponse(BaseModel):
    message: str
    id: int


def build_patient_search(db: Session, keyword: str, mode: str):
    keyword = (keyword or '').strip()
    if not keyword:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Keyword required.')

    query = db.query(Patient)
    contains = f'%{keyword}%'

    if mode == 'search_name':
        last_name, _, first_name = (part.strip() for part in keyword.partition(','))
        if last_name and first_name:
            query = query.filter(
                func.lower(Patient.lastname) == last_name.lower(),
                func.lower(Patient.firstname).like(f'{first_name.lower()}%'),
            )
        elif last_name:
            query = query.filter(func.lower(Patient.lastname).like(f'{last_name.lower()}%'))
        else:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid name format.')
    elif mode == 'search_phone':
        query = query.filter(
            or_(
                Patient.homephone.like(contains),
                Patient.cellphone.like(contains),
                Patient.workphone.like(contains),
            )
        )
    elif mode == 'search_dob':
        query = query.filter(cast(Patient.dob, String).like(contains))
    elif mode == 'search_health_number':
        query = query.filter(Patient.healthinsurance_number.like(contains))
    elif mode == 'search_email':
        query = query.filter(Patient.email.like(contains))
    elif mode == 'search_address':
        query = query.filter(Patient.address.like(contains))
    else:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid search mode.')

    return query.order_by(Patient.lastname.asc(), Patient.firstname.asc()).limit(SEARCH_LIMIT)


@router.get('/search', response_model=list[PatientResponse])
def search_patients(
    keyword: str = Query(default=''),
    mode: str = Query(default='search_name'),
    db: Session = Depends(get_db),
):
    query = build_patient_search(db, keyword, mode)
    ensure_database_ready()

    try:
        return query.all()
    except SQLAlchemyError as exc:
        logger.exception('Patient search failed.')
        raise database_unavailable() from exc


@router.post('', response_model=PatientCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_patient(data: CreatePatientRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        patient = Patient(**data.model_dump(exclude_none=True))
        db.add(patient)
        db.commit()
        db.refresh(patient)
        return PatientCreatedResponse(message='Patient added successfully.', id=patient.id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to insert patient.')
        raise database_unavailable() from exc


@router.get('/{patient_id}', response_model=PatientResponse)
def get_patient(patient_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        patient = db.query(Patient).filter(Patient.id == patient_id).first()
    except SQLAlchemyError as exc:
        logger.exception('Failed to fetch patient %s.', patient_id)
        raise database_unavailable() from exc

    if patient is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Patient not found.')

    return patient


@router.put('/{patient_id}', response_model=PatientResponse)
def update_patient(patient_id: int, data: UpdatePatientRequest, db: Session = Depends(get_db)):
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='No valid fields to update.')

    ensure_database_ready()

    try:
        patient = db.query(Patient).filter(Patient.id == patient_id).first()
        if patient is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Patient not found.')

        for field, value in changes.items():
            setattr(patient, field, value)

        db.commit()
        db.refresh(patient)
        return patient
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to update patient %s.', patient_id)
        raise database_unavailable() from exc
