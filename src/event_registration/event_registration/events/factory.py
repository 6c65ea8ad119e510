from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import EventStatus
from .model import EventDates
from .strategies.base import EventStatusStrategy
from .strategies.event_window_strategy import EventWindowStrategy
from .strategies.registration_window_strategy import RegistrationWindowStrategy


@dataclass
class EventStatusStrategyFactory:
    """Factory Pattern: choose the status strategy from the dates an event has."""

    def for_dates(self, dates: EventDates) -> EventStatusStrategy:
        if dates.has_registration_window:
            return RegistrationWindowStrategy()
        return EventWindowStrategy()

    def resolve(
        self,
        *,
        today: date,
        dates: EventDates,
        current: Optional[EventStatus] = None,
        override: Optional[EventStatus] = None,
    ) -> EventStatus:
        """Status to store: explicit override, else sticky cancel, else derived."""
        if override is not None:
            return override
        if current == EventStatus.CANCELLED:
            return EventStatus.CANCELLED
        return self.for_dates(dates).decide(today=today, dates=dates).status
