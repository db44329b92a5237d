from datetime import date, time

import pytest
from fastapi import HTTPException

from backend.routes.schedule_routes import get_day_schedule, load_providers
from backend.scheduling.day_grid import GridConfig

SCHEDULE_DAY = date(2025, 8, 4)


@pytest.fixture(autouse=True)
def skip_schema_check(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('backend.routes.schedule_routes.ensure_database_ready', lambda: None)


def cells_for(response, provider_id: int) -> dict:
    column = [provider.id for provider in response.providers].index(provider_id)
    return {row.time: row.cells[column] for row in response.rows}


def test_day_schedule_lays_out_every_doctor_by_default(db_session, doctors, book) -> None:
    wong, smith = doctors
    book(wong, time(10, 0), 30)
    book(wong, time(11, 0), 15)
    book(wong, time(10, 30), 20)

    response = get_day_schedule(schedule_date=SCHEDULE_DAY, provider_ids=None, db=db_session)
    wong_cells = cells_for(response, wong.id)
    smith_cells = cells_for(response, smith.id)

    assert [provider.name for provider in response.providers] == ['Dr. Wong', 'Dr. Smith']
    assert response.step_minutes == 5
    assert len(response.rows) == 204
    assert (wong_cells['10:00'].kind, wong_cells['10:00'].span_rows) == ('anchor', 6)
    assert (wong_cells['10:30'].kind, wong_cells['10:30'].span_rows) == ('anchor', 4)
    assert (wong_cells['11:00'].kind, wong_cells['11:00'].span_rows) == ('anchor', 3)
    assert wong_cells['10:05'].kind == 'hidden'
    assert not wong_cells['10:05'].clickable
    assert wong_cells['10:50'].clickable
    assert all(cell.kind == 'empty' for cell in smith_cells.values())


def test_day_schedule_anchor_carries_serialized_appointment(db_session, doctors, book) -> None:
    wong, _smith = doctors
    book(wong, time(9, 0), 15, status='present')

    response = get_day_schedule(schedule_date=SCHEDULE_DAY, provider_ids=[wong.id], db=db_session)
    anchor = cells_for(response, wong.id)['09:00']

    assert anchor.appointment.lastname == 'Nguyen'
    assert anchor.appointment.status_label == 'Here'
    assert anchor.appointment.end_time == '09:15'
    assert cells_for(response, wong.id)['09:05'].appointment is None


def test_day_schedule_keeps_requested_provider_order(db_session, doctors) -> None:
    wong, smith = doctors

    response = get_day_schedule(schedule_date=SCHEDULE_DAY, provider_ids=[smith.id, wong.id], db=db_session)

    assert [provider.id for provider in response.providers] == [smith.id, wong.id]
    assert [cell.provider_id for cell in response.rows[0].cells] == [smith.id, wong.id]


def test_load_providers_rejects_unknown_doctor(db_session, doctors) -> None:
    wong, _smith = doctors

    with pytest.raises(HTTPException) as exception_info:
        load_providers(db_session, [wong.id, 99])

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Doctor(s) not found: 99.'


def test_day_schedule_uses_configured_grid(db_session, doctors, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        'backend.core.config.get_grid_config',
        lambda: GridConfig(start_minutes=9 * 60, end_minutes=10 * 60, step_minutes=15),
    )

    response = get_day_schedule(schedule_date=SCHEDULE_DAY, provider_ids=None, db=db_session)

    assert [row.time for row in response.rows] == ['09:00', '09:15', '09:30', '09:45', '10:00']
    assert response.step_minutes == 15


def test_day_schedule_reports_bad_booking_data_as_server_error(db_session, doctors, book) -> None:
    wong, _smith = doctors
    book(wong, time(9, 0), 0)

    with pytest.raises(HTTPException) as exception_info:
        get_day_schedule(schedule_date=SCHEDULE_DAY, provider_ids=None, db=db_session)

    assert exception_info.value.status_code == 500
