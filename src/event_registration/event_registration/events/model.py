from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import EventStatus


@dataclass(frozen=True)
class EventDates:
    """The four dates that drive status derivation."""

    start_date: date
    end_date: date
    registration_start_date: Optional[date] = None
    registration_end_date: Optional[date] = None

    @property
    def has_registration_window(self) -> bool:
        return self.registration_start_date is not None and self.registration_end_date is not None


@dataclass(frozen=True)
class Event:
    id_event: int
    title_event: str
    description: Optional[str]
    start_date: date
    end_date: date
    registration_start_date: Optional[date]
    registration_end_date: Optional[date]
    status: EventStatus
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def dates(self) -> EventDates:
        return EventDates(
            start_date=self.start_date,
            end_date=self.end_date,
            registration_start_date=self.registration_start_date,
            registration_end_date=self.registration_end_date,
        )

    def to_dict(self) -> dict:
        return {
            "id_event": self.id_event,
            "title_event": self.title_event,
            "description": self.description,
            "start_date": to_iso(self.start_date),
            "end_date": to_iso(self.end_date),
            "registration_start_date": to_iso(self.registration_start_date),
            "registration_end_date": to_iso(self.registration_end_date),
            "status": self.status.value,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }


@dataclass(frozen=True)
class NewEvent:
    title_event: str
    description: Optional[str]
    dates: EventDates
    status: EventStatus


@dataclass(frozen=True)
class RegisteredEvent:
    event: Event
    registered_at: Optional[datetime]

    def to_dict(self) -> dict:
        return {
            "eventId": self.event.id_event,
            "title": self.event.title_event,
            "start_date": to_iso(self.event.start_date),
            "end_date": to_iso(self.event.end_date),
            "status": self.event.status.value,
            "registrationDate": to_iso(self.registered_at),
        }
