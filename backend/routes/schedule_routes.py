import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core import config
from backend.models.doctor import Doctor
from backend.routes.appointment_routes import AppointmentResponse, serialize_appointment
from backend.routes.common import database_unavailable, ensure_database_ready, get_db
from backend.scheduling.day_grid import CellKind, DayGrid, build_day_grid
from backend.scheduling.errors import SchedulingError
from backend.services import appointment_store

router = APIRouter(tags=['schedule'])

logger = logging.getLogger(__name__)


class ProviderColumnResponse(BaseModel):
    id: int
    name: str


class GridCellResponse(BaseModel):
    provider_id: int
    kind: str
    clickable: bool
    span_rows: int | None = None
    appointment: AppointmentResponse | None = None


class GridRowResponse(BaseModel):
    time: str
    cells: list[GridCellResponse]


class DayGridResponse(BaseModel):
    date: date
    step_minutes: int
    providers: list[ProviderColumnResponse]
    rows: list[GridRowResponse]


def load_providers(db: Session, provider_ids: list[int] | None) -> list[Doctor]:
    if not provider_ids:
        return db.query(Doctor).order_by(Doctor.id.asc()).all()

    found = {doctor.id: doctor for doctor in db.query(Doctor).filter(Doctor.id.in_(provider_ids)).all()}
    missing = [provider_id for provider_id in provider_ids if provider_id not in found]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f'Doctor(s) not found: {", ".join(str(provider_id) for provider_id in missing)}.',
        )

    return [found[provider_id] for provider_id in dict.fromkeys(provider_ids)]


def serialize_day_grid(grid: DayGrid, providers: list[Doctor], step_minutes: int) -> DayGridResponse:
    return DayGridResponse(
        date=grid.date,
        step_minutes=step_minutes,
        providers=[ProviderColumnResponse(id=doctor.id, name=doctor.name) for doctor in providers],
        rows=[
            GridRowResponse(
                time=row.label,
                cells=[
                    GridCellResponse(
                        provider_id=cell.provider_id,
                        kind=cell.kind.value,
                        clickable=cell.clickable,
                        span_rows=cell.span_rows,
                        appointment=serialize_appointment(cell.appointment) if cell.kind is CellKind.ANCHOR else None,
                    )
                    for cell in row.cells
                ],
            )
            for row in grid.rows
        ],
    )


@router.get('/day', response_model=DayGridResponse)
def get_day_schedule(
    schedule_date: date = Query(..., alias='date'),
    provider_ids: list[int] | None = Query(default=None),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        grid_config = config.get_grid_config()
        providers = load_providers(db, provider_ids)
        appointments = appointment_store.fetch_appointments(db, schedule_date)
        grid = build_day_grid(
            schedule_date,
            [doctor.id for doctor in providers],
            appointments,
            grid_config,
        )
        return serialize_day_grid(grid, providers, grid_config.step_minutes)
    except SchedulingError as exc:
        # Inputs here are stored rows and server settings, not client data.
        logger.error('Cannot lay out schedule for %s: %s', schedule_date, exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.exception('Failed to build day schedule for %s.', schedule_date)
        raise database_unavailable() from exc
