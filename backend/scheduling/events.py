"""Change notifications emitted after an appointment write commits.

The host decides how to dispatch them (websocket push, message bus, log line).
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Union


@dataclass(frozen=True)
class AppointmentCreated:
    appointment_id: int
    date: date


@dataclass(frozen=True)
class AppointmentUpdated:
    appointment_id: int
    date: date


@dataclass(frozen=True)
class AppointmentDeleted:
    appointment_id: int
    date: date


AppointmentEvent = Union[AppointmentCreated, AppointmentUpdated, AppointmentDeleted]
EventListener = Callable[[AppointmentEvent], None]
