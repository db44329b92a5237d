"""Day view layout: fixed time rows with appointment blocks spanning rows.

Every (row, provider) pair gets exactly one cell:

* ``empty``  - nothing starts or continues here; clicking books this slot.
* ``anchor`` - an appointment starts here and covers ``span_rows`` rows.
* ``hidden`` - covered by an anchor above it; the renderer draws nothing.

Columns are laid out independently, so a long appointment for one provider
never hides rows in another provider's column.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Hashable, Iterable, Sequence

from backend.scheduling.errors import ConfigurationError, InvalidDuration
from backend.scheduling.intervals import MINUTES_PER_DAY, minutes_to_label, parse_time_label, to_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridConfig:
    start_minutes: int = 7 * 60
    end_minutes: int = 23 * 60 + 55
    step_minutes: int = 5

    def __post_init__(self) -> None:
        if self.step_minutes <= 0:
            raise ConfigurationError(f'Grid step must be positive, got {self.step_minutes}.')
        if not 0 <= self.start_minutes <= self.end_minutes < MINUTES_PER_DAY:
            raise ConfigurationError(
                f'Grid range {minutes_to_label(self.start_minutes)}-{minutes_to_label(self.end_minutes)} '
                'must be ordered and fall within one day.'
            )
        if (self.end_minutes - self.start_minutes) % self.step_minutes != 0:
            raise ConfigurationError(
                f'Grid step of {self.step_minutes} minutes does not evenly divide '
                f'{minutes_to_label(self.start_minutes)}-{minutes_to_label(self.end_minutes)}.'
            )

    @classmethod
    def from_labels(cls, start: str, end: str, step_minutes: int) -> 'GridConfig':
        return cls(
            start_minutes=parse_time_label(start),
            end_minutes=parse_time_label(end),
            step_minutes=step_minutes,
        )

    def row_minutes(self) -> range:
        return range(self.start_minutes, self.end_minutes + 1, self.step_minutes)

    def span_rows(self, duration_minutes: int) -> int:
        return max(1, math.ceil(duration_minutes / self.step_minutes))


DEFAULT_GRID_CONFIG = GridConfig()


class CellKind(str, Enum):
    EMPTY = 'empty'
    ANCHOR = 'anchor'
    HIDDEN = 'hidden'


@dataclass(frozen=True)
class GridCell:
    provider_id: Hashable
    kind: CellKind
    appointment: Any = None
    span_rows: int | None = None

    @property
    def clickable(self) -> bool:
        return self.kind is CellKind.EMPTY


@dataclass(frozen=True)
class GridRow:
    minutes: int
    label: str
    cells: tuple[GridCell, ...]

    def cell_for(self, provider_id: Hashable) -> GridCell:
        for cell in self.cells:
            if cell.provider_id == provider_id:
                return cell
        raise KeyError(provider_id)


@dataclass(frozen=True)
class DayGrid:
    date: date
    providers: tuple[Hashable, ...]
    rows: tuple[GridRow, ...]


def index_appointment_starts(
    providers: Sequence[Hashable],
    appointments: Iterable[Any],
) -> dict[tuple[Hashable, int], Any]:
    """Map (provider, start minute) to the appointment drawn there.

    Two appointments starting together for one provider can only come from an
    out-of-band write; the lowest id wins so the layout stays deterministic.
    """
    wanted = set(providers)
    starts: dict[tuple[Hashable, int], Any] = {}

    for appointment in sorted(appointments, key=lambda item: item.id):
        if appointment.provider_id not in wanted:
            continue

        if appointment.duration_minutes is None or appointment.duration_minutes <= 0:
            raise InvalidDuration(
                f'Appointment {appointment.id} has invalid duration {appointment.duration_minutes!r}.'
            )

        key = (appointment.provider_id, to_minutes(appointment.start_time))
        if key in starts:
            logger.warning(
                'Appointments %s and %s both start at %s for provider %s; showing %s.',
                starts[key].id,
                appointment.id,
                minutes_to_label(key[1]),
                key[0],
                starts[key].id,
            )
            continue
        starts[key] = appointment

    return starts


def build_day_grid(
    day: date,
    providers: Sequence[Hashable],
    appointments: Iterable[Any],
    config: GridConfig = DEFAULT_GRID_CONFIG,
) -> DayGrid:
    """Lay out ``appointments`` for ``day`` as rows of cells, one per provider.

    ``appointments`` must already be narrowed to ``day``. Each item needs
    ``id``, ``provider_id``, ``start_time`` and ``duration_minutes``. Spans
    that run past the last row are cut off there; the grid is never extended.
    """
    providers = tuple(providers)
    starts = index_appointment_starts(providers, appointments)
    hidden: dict[Hashable, set[int]] = {provider_id: set() for provider_id in providers}
    rows: list[GridRow] = []

    for row_minute in config.row_minutes():
        cells: list[GridCell] = []

        for provider_id in providers:
            if row_minute in hidden[provider_id]:
                cells.append(GridCell(provider_id=provider_id, kind=CellKind.HIDDEN))
                continue

            appointment = starts.get((provider_id, row_minute))
            if appointment is None:
                cells.append(GridCell(provider_id=provider_id, kind=CellKind.EMPTY))
                continue

            span = config.span_rows(appointment.duration_minutes)
            for offset in range(1, span):
                covered = row_minute + offset * config.step_minutes
                if covered > config.end_minutes:
                    break
                hidden[provider_id].add(covered)

            cells.append(
                GridCell(
                    provider_id=provider_id,
                    kind=CellKind.ANCHOR,
                    appointment=appointment,
                    span_rows=span,
                )
            )

        rows.append(GridRow(minutes=row_minute, label=minutes_to_label(row_minute), cells=tuple(cells)))

    return DayGrid(date=day, providers=providers, rows=tuple(rows))
