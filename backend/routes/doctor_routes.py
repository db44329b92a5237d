import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.models.doctor import Doctor
from backend.routes.common import database_unavailable, get_db

router = APIRouter(tags=['doctors'])

logger = logging.getLogger(__name__)


class DoctorResponse(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


@router.get('', response_model=list[DoctorResponse])
def list_doctors(db: Session = Depends(get_db)):
    try:
        return db.query(Doctor).order_by(Doctor.id.asc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Failed to list doctors.')
        raise database_unavailable() from exc
