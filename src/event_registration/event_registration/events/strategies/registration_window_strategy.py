from __future__ import annotations

from datetime import date

from ..model import EventDates
from .base import EventStatusStrategy


class RegistrationWindowStrategy(EventStatusStrategy):
    """Status follows the registration window [reg_start, reg_end]."""

    def window(self, dates: EventDates) -> tuple[date, date]:
        if not dates.has_registration_window:
            raise ValueError("Registration window is not set")
        return dates.registration_start_date, dates.registration_end_date
