from datetime import time
from itertools import combinations
from types import SimpleNamespace

import pytest

from backend.scheduling.conflicts import BookedInterval, find_conflict, has_conflict
from backend.scheduling.errors import InvalidDuration, InvalidTime
from backend.scheduling.intervals import intervals_overlap

TEN_AM = BookedInterval(id=1, start_minutes=600, duration_minutes=30)


def test_touching_end_is_not_a_conflict() -> None:
    assert not has_conflict(630, 15, [TEN_AM])


def test_touching_start_is_not_a_conflict() -> None:
    assert not has_conflict(570, 30, [TEN_AM])


def test_partial_overlap_is_a_conflict() -> None:
    assert has_conflict(615, 10, [TEN_AM])
    assert has_conflict(590, 15, [TEN_AM])


def test_containment_is_a_conflict_in_both_directions() -> None:
    assert has_conflict(605, 10, [TEN_AM])
    assert has_conflict(590, 60, [TEN_AM])


def test_identical_range_is_a_conflict() -> None:
    assert has_conflict(600, 30, [TEN_AM])


def test_find_conflict_returns_the_first_overlapping_booking() -> None:
    later = BookedInterval(id=2, start_minutes=660, duration_minutes=15)

    assert find_conflict(620, 50, [TEN_AM, later]) == TEN_AM
    assert find_conflict(640, 30, [TEN_AM, later]) == later
    assert find_conflict(630, 30, [TEN_AM, later]) is None


def test_excluded_appointment_cannot_conflict_with_itself() -> None:
    editing = BookedInterval(id=42, start_minutes=600, duration_minutes=30)

    assert not has_conflict(610, 30, [editing], exclude_id=42)
    assert has_conflict(610, 30, [editing], exclude_id=7)


def test_exclusion_only_skips_the_matching_id() -> None:
    editing = BookedInterval(id=42, start_minutes=600, duration_minutes=30)
    neighbour = BookedInterval(id=43, start_minutes=640, duration_minutes=20)

    assert find_conflict(620, 30, [editing, neighbour], exclude_id=42) == neighbour


def test_empty_existing_list_never_conflicts() -> None:
    assert not has_conflict(600, 30, [])


@pytest.mark.parametrize('duration', [0, -5])
def test_non_positive_candidate_duration_is_rejected(duration: int) -> None:
    with pytest.raises(InvalidDuration):
        has_conflict(600, duration, [TEN_AM])


def test_negative_start_is_rejected() -> None:
    with pytest.raises(InvalidTime):
        has_conflict(-5, 15, [TEN_AM])


def test_starts_past_midnight_are_accepted() -> None:
    assert not has_conflict(1500, 15, [TEN_AM])


def test_existing_booking_with_invalid_duration_is_reported() -> None:
    broken = BookedInterval(id=9, start_minutes=700, duration_minutes=0)

    with pytest.raises(InvalidDuration):
        has_conflict(600, 15, [broken])


def test_existing_list_is_not_modified() -> None:
    existing = [TEN_AM, BookedInterval(id=2, start_minutes=660, duration_minutes=15)]
    snapshot = list(existing)

    has_conflict(615, 10, existing)

    assert existing == snapshot


def test_booked_interval_from_appointment_truncates_seconds() -> None:
    appointment = SimpleNamespace(id=5, start_time=time(10, 30, 59), duration_minutes=20)

    booked = BookedInterval.from_appointment(appointment)

    assert booked == BookedInterval(id=5, start_minutes=630, duration_minutes=20)
    assert booked.end_minutes == 650


def test_accepted_bookings_never_overlap_pairwise() -> None:
    accepted: list[BookedInterval] = []
    requests = [(600, 30), (615, 10), (630, 20), (645, 15), (650, 10), (540, 60), (590, 10), (700, 5)]

    for index, (start, duration) in enumerate(requests):
        if not has_conflict(start, duration, accepted):
            accepted.append(BookedInterval(id=index, start_minutes=start, duration_minutes=duration))

    assert [(item.start_minutes, item.duration_minutes) for item in accepted] == [
        (600, 30),
        (630, 20),
        (650, 10),
        (540, 60),
        (700, 5),
    ]
    for first, second in combinations(accepted, 2):
        assert not intervals_overlap(first.start_minutes, first.end_minutes, second.start_minutes, second.end_minutes)
