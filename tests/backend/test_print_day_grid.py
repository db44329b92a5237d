from datetime import date, time
from types import SimpleNamespace

from backend.print_day_grid import COLUMN_WIDTH, describe_cell, render_day_grid
from backend.scheduling.day_grid import CellKind, GridCell, GridConfig, build_day_grid


def appt(appointment_id: int, provider_id: int, start: time, duration_minutes: int, status: str = 'booked'):
    return SimpleNamespace(
        id=appointment_id,
        provider_id=provider_id,
        patient_id=10,
        patient=SimpleNamespace(lastname='Nguyen', firstname='Ana'),
        start_time=start,
        duration_minutes=duration_minutes,
        status=status,
    )


def test_describe_cell_formats_each_kind() -> None:
    booking = appt(1, 1, time(10, 0), 30, status='present')

    assert describe_cell(GridCell(provider_id=1, kind=CellKind.EMPTY)) == ''
    assert describe_cell(GridCell(provider_id=1, kind=CellKind.HIDDEN)) == '  |'
    assert describe_cell(GridCell(provider_id=1, kind=CellKind.ANCHOR, appointment=booking, span_rows=6)) == (
        '[Here] Nguyen, Ana (30m)'
    )


def test_render_day_grid_prints_header_and_one_line_per_row() -> None:
    config = GridConfig(start_minutes=10 * 60, end_minutes=10 * 60 + 15, step_minutes=5)
    grid = build_day_grid(date(2025, 8, 4), [1, 2], [appt(1, 1, time(10, 0), 10)], config)

    lines = render_day_grid(grid, {1: 'Dr. Wong', 2: 'Dr. Smith'}).splitlines()

    assert lines[0].startswith('Time  | Dr. Wong')
    assert 'Dr. Smith' in lines[0]
    assert lines[1].startswith('10:00 | [To Do] Nguyen, Ana (10m)')
    assert lines[2].startswith('10:05 |   |')
    assert lines[3] == '10:10 | ' + ' ' * COLUMN_WIDTH + ' |'
    assert len(lines) == 5
