from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import now_local, start_of_day
from ..core.constants import DEADLINE_REMINDER_WINDOW_HOURS, EVENT_REMINDER_WINDOW_HOURS
from ..core.enums import EventStatus, RoleName
from ..inscriptions.repository import InscriptionRepository
from ..notifications.service import NotificationService
from ..users.repository import UserRepository
from .factory import EventStatusStrategyFactory
from .model import Event
from .notices import change_notice, deadline_notice, reminder_notice
from .repository import EventRepository
from .service import EventService

logger = logging.getLogger(__name__)

_SWEPT_STATUSES = (EventStatus.UPCOMING, EventStatus.OPEN)


@dataclass
class SweepReport:
    examined: int = 0
    status_changes: int = 0
    reminders: int = 0
    deadline_reminders: int = 0
    failures: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def in_window(moment: datetime, now: datetime, hours: tuple[int, int]) -> bool:
    low, high = hours
    return now + timedelta(hours=low) <= moment <= now + timedelta(hours=high)


class EventSweeper:
    """Periodic pass over events: refresh derived statuses and send reminders.

    Reminder windows are measured from midnight of the sweep day, so a run at
    any hour matches the same events. A daily run hits each event once per
    window.
    """

    def __init__(
        self,
        events: EventRepository,
        inscriptions: InscriptionRepository,
        users: UserRepository,
        notifications: NotificationService,
        event_service: EventService,
        *,
        strategy_factory: EventStatusStrategyFactory | None = None,
    ):
        self._events = events
        self._inscriptions = inscriptions
        self._users = users
        self._notifications = notifications
        self._event_service = event_service
        self._factory = strategy_factory or EventStatusStrategyFactory()

    def run(self, *, now: Optional[datetime] = None) -> SweepReport:
        now = now or now_local()
        report = SweepReport()

        for event in self._events.list_not_cancelled():
            report.examined += 1
            try:
                self._sweep_one(event, now, report)
            except Exception:
                report.failures += 1
                logger.exception("Sweep failed for event %s", event.id_event)

        logger.info("Event sweep at %s: %s", now.isoformat(timespec="minutes"), report.to_dict())
        return report

    def _sweep_one(self, event: Event, now: datetime, report: SweepReport) -> None:
        status = event.status
        if status in _SWEPT_STATUSES:
            new_status = self._factory.resolve(today=now.date(), dates=event.dates, current=status)
            if new_status != status:
                self._events.update_status(event.id_event, new_status)
                report.status_changes += 1
                logger.info("Event %s status %s -> %s", event.id_event, status.value, new_status.value)
                notice = change_notice(title=event.title_event, old_status=status, new_status=new_status)
                self._event_service.notify_registrants(event.id_event, notice)
                status = new_status

        day_start = start_of_day(now.date())
        if in_window(start_of_day(event.start_date), day_start, EVENT_REMINDER_WINDOW_HOURS):
            report.reminders += self._event_service.notify_registrants(
                event.id_event, reminder_notice(event.title_event)
            )

        reg_end = event.registration_end_date
        if (
            status in _SWEPT_STATUSES
            and reg_end is not None
            and in_window(start_of_day(reg_end), day_start, DEADLINE_REMINDER_WINDOW_HOURS)
        ):
            registered = set(self._inscriptions.list_user_ids_for_event(event.id_event))
            targets = [uid for uid in self._users.list_ids_by_role(RoleName.EMPLOYEE.value) if uid not in registered]
            notice = deadline_notice(event.title_event, reg_end)
            report.deadline_reminders += self._notifications.notify_many(
                targets, notice.type, notice.message, related_event_id=event.id_event
            )
