from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date

from ...core.enums import EventStatus
from ..model import EventDates


@dataclass(frozen=True)
class StatusDecision:
    status: EventStatus
    window_start: date
    window_end: date


class EventStatusStrategy(ABC):
    """Strategy Pattern: each strategy picks the date window a status is read from."""

    @abstractmethod
    def window(self, dates: EventDates) -> tuple[date, date]:
        raise NotImplementedError

    def decide(self, *, today: date, dates: EventDates) -> StatusDecision:
        start, end = self.window(dates)
        if today < start:
            status = EventStatus.UPCOMING
        elif today <= end:
            status = EventStatus.OPEN
        else:
            status = EventStatus.CLOSED
        return StatusDecision(status=status, window_start=start, window_end=end)
