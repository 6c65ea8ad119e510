from __future__ import annotations

from enum import Enum
from typing import Optional


class RoleName(str, Enum):
    """Role names used for authorization."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class DepartmentCode(str, Enum):
    """Fixed department codes."""

    DDD = "DDD"
    DSSI = "DSSI"
    DRH = "DRH"
    DFO = "DFO"


class FieldTypeName(str, Enum):
    """Input kinds a registration form field can have."""

    TEXT = "text"
    NUMBER = "number"
    FILE = "file"
    DATE = "date"
    CHECKBOX = "checkbox"
    RADIO = "radio"

    @property
    def has_options(self) -> bool:
        return self in (FieldTypeName.CHECKBOX, FieldTypeName.RADIO)

    @classmethod
    def parse(cls, value: object) -> Optional["FieldTypeName"]:
        if value is None:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class EventStatus(str, Enum):
    """Event status stored in the database.

    CANCELLED is only ever set by hand; the other three are derived from dates.
    """

    UPCOMING = "upcoming"
    OPEN = "open"
    CLOSED = "closed"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: object) -> Optional["EventStatus"]:
        if value is None:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class NotificationType(str, Enum):
    EVENT_CREATED = "EVENT_CREATED"
    EVENT_UPDATED = "EVENT_UPDATED"
    EVENT_CANCELLED = "EVENT_CANCELLED"
    EVENT_REMINDER = "EVENT_REMINDER"
    REGISTRATION_DEADLINE_REMINDER = "REGISTRATION_DEADLINE_REMINDER"
    REGISTRATION_CONFIRMATION = "REGISTRATION_CONFIRMATION"
