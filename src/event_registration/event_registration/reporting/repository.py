from __future__ import annotations

from typing import Protocol, Sequence

from .model import DailyRegistrationCount, DepartmentRegistrationCount, EventRegistrationCount


class ReportRepository(Protocol):
    """Read-only aggregate queries over inscriptions of non-deleted events."""

    def registrations_per_event(self) -> Sequence[EventRegistrationCount]:
        """Highest count first."""
        raise NotImplementedError

    def registrations_over_time(self) -> Sequence[DailyRegistrationCount]:
        """One row per day with registrations, oldest first."""
        raise NotImplementedError

    def registrations_by_department(self) -> Sequence[DepartmentRegistrationCount]:
        """Highest count first."""
        raise NotImplementedError

    def count_registrations(self) -> int:
        raise NotImplementedError
