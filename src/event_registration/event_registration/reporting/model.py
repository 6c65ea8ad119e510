from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class EventRegistrationCount:
    id_event: int
    event_name: str
    count: int

    def to_dict(self) -> dict:
        return {"eventId": self.id_event, "eventName": self.event_name, "registrationcount": self.count}


@dataclass(frozen=True)
class DailyRegistrationCount:
    day: date
    count: int

    def to_dict(self) -> dict:
        return {"date": self.day.isoformat(), "registrationcount": self.count}


@dataclass(frozen=True)
class DepartmentRegistrationCount:
    department_name: Optional[str]
    count: int

    def to_dict(self) -> dict:
        return {"departmentName": self.department_name or "-", "registrationcount": self.count}
