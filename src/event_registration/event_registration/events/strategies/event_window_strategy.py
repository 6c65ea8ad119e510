from __future__ import annotations

from datetime import date

from ..model import EventDates
from .base import EventStatusStrategy


class EventWindowStrategy(EventStatusStrategy):
    """Fallback when no registration window is set: use [start_date, end_date]."""

    def window(self, dates: EventDates) -> tuple[date, date]:
        return dates.start_date, dates.end_date
