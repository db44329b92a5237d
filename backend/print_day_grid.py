"""Print one day's schedule grid to stdout.

Usage:
    python -m backend.print_day_grid 2025-08-04
    python -m backend.print_day_grid 2025-08-04 --provider 1 --provider 2
"""
import argparse
import sys
from datetime import date

from backend.core import config
from backend.database import SessionLocal
from backend.models.doctor import Doctor
from backend.scheduling.day_grid import CellKind, DayGrid, build_day_grid
from backend.scheduling.errors import SchedulingError
from backend.scheduling.status import AppointmentStatus
from backend.services import appointment_store

COLUMN_WIDTH = 32


def describe_cell(cell) -> str:
    if cell.kind is CellKind.HIDDEN:
        return '  |'
    if cell.kind is CellKind.EMPTY:
        return ''

    appointment = cell.appointment
    patient = appointment.patient
    name = f'{patient.lastname}, {patient.firstname}' if patient else f'patient {appointment.patient_id}'
    label = AppointmentStatus.parse(appointment.status).label
    return f'[{label}] {name} ({appointment.duration_minutes}m)'


def render_day_grid(grid: DayGrid, provider_names: dict) -> str:
    names = [str(provider_names.get(provider_id, provider_id)).ljust(COLUMN_WIDTH) for provider_id in grid.providers]
    lines = [' | '.join(['Time '] + names).rstrip()]

    for row in grid.rows:
        cells = [describe_cell(cell)[:COLUMN_WIDTH].ljust(COLUMN_WIDTH) for cell in row.cells]
        lines.append(' | '.join([row.label] + cells).rstrip())

    return '\n'.join(lines)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description='Print the day schedule grid.')
    parser.add_argument('date', type=date.fromisoformat, help='Day to print, YYYY-MM-DD.')
    parser.add_argument('--provider', dest='providers', type=int, action='append', help='Doctor id; repeatable.')
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        doctors = db.query(Doctor).order_by(Doctor.id.asc()).all()
        provider_names = {doctor.id: doctor.name for doctor in doctors}
        providers = args.providers or list(provider_names)

        grid = build_day_grid(
            args.date,
            providers,
            appointment_store.fetch_appointments(db, args.date),
            config.get_grid_config(),
        )
        print(render_day_grid(grid, provider_names))
    except SchedulingError as exc:
        print(f'Cannot build schedule: {exc}', file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
