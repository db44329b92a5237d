"""Double-booking detection for a single provider and date."""

from dataclasses import dataclass
from typing import Iterable

from backend.scheduling.errors import InvalidDuration, InvalidTime
from backend.scheduling.intervals import intervals_overlap, to_minutes, validate_duration


@dataclass(frozen=True)
class BookedInterval:
    id: int | None
    start_minutes: int
    duration_minutes: int

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes

    @classmethod
    def from_appointment(cls, appointment) -> 'BookedInterval':
        return cls(
            id=appointment.id,
            start_minutes=to_minutes(appointment.start_time),
            duration_minutes=appointment.duration_minutes,
        )


def find_conflict(
    candidate_start: int,
    candidate_duration: int,
    existing: Iterable[BookedInterval],
    exclude_id=None,
) -> BookedInterval | None:
    """Return the first existing booking that overlaps the candidate, if any.

    ``existing`` must already be narrowed to the candidate's provider and date.
    ``exclude_id`` skips the appointment being edited so it cannot collide
    with itself. The caller rounds ``candidate_start`` beforehand; any
    non-negative minute value is accepted here.
    """
    if isinstance(candidate_start, bool) or not isinstance(candidate_start, int) or candidate_start < 0:
        raise InvalidTime(f'Start minute must be a non-negative integer, got {candidate_start!r}.')
    validate_duration(candidate_duration)

    candidate_end = candidate_start + candidate_duration

    for booked in existing:
        if exclude_id is not None and booked.id == exclude_id:
            continue

        if booked.duration_minutes is None or booked.duration_minutes <= 0:
            raise InvalidDuration(
                f'Existing appointment {booked.id} has invalid duration {booked.duration_minutes!r}.'
            )

        if intervals_overlap(candidate_start, candidate_end, booked.start_minutes, booked.end_minutes):
            return booked

    return None


def has_conflict(
    candidate_start: int,
    candidate_duration: int,
    existing: Iterable[BookedInterval],
    exclude_id=None,
) -> bool:
    return find_conflict(candidate_start, candidate_duration, existing, exclude_id) is not None
