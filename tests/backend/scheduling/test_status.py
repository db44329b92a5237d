import pytest

from backend.scheduling.errors import InvalidAppointment
from backend.scheduling.status import AppointmentStatus


@pytest.mark.parametrize(
    ('current', 'expected'),
    [
        (AppointmentStatus.BOOKED, AppointmentStatus.PRESENT),
        (AppointmentStatus.PRESENT, AppointmentStatus.BEING_SEEN),
        (AppointmentStatus.BEING_SEEN, AppointmentStatus.FINISHED),
        (AppointmentStatus.FINISHED, AppointmentStatus.MISSED),
        (AppointmentStatus.MISSED, AppointmentStatus.BOOKED),
    ],
)
def test_next_follows_the_fixed_cycle(current: AppointmentStatus, expected: AppointmentStatus) -> None:
    assert current.next() is expected


def test_five_clicks_return_to_the_start() -> None:
    status = AppointmentStatus.PRESENT
    for _ in range(5):
        status = status.next()

    assert status is AppointmentStatus.PRESENT


def test_parse_normalizes_case_and_whitespace() -> None:
    assert AppointmentStatus.parse(' Being_Seen ') is AppointmentStatus.BEING_SEEN


@pytest.mark.parametrize('value', ['', 'cancelled', None])
def test_parse_rejects_unknown_status(value) -> None:
    with pytest.raises(InvalidAppointment):
        AppointmentStatus.parse(value)


def test_labels_match_front_desk_wording() -> None:
    assert [status.label for status in AppointmentStatus] == ['To Do', 'Here', 'In Room', 'Billed', 'No Show']
