from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local, parse_date_field
from ..common.validators import optional_text, require_non_empty
from ..core.enums import EventStatus, RoleName
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..inscriptions.repository import InscriptionRepository
from ..notifications.service import NotificationService
from ..users.repository import UserRepository
from .factory import EventStatusStrategyFactory
from .model import Event, EventDates, NewEvent, RegisteredEvent
from .notices import Notice, change_notice, created_notice, removed_notice
from .repository import EventRepository

logger = logging.getLogger(__name__)

_DATE_FIELDS = {
    "start_date": "Start date",
    "end_date": "End date",
    "registration_start_date": "Registration start date",
    "registration_end_date": "Registration end date",
}


def check_event_dates(dates: EventDates) -> None:
    """Ordering rules shared by create and update."""
    if dates.end_date < dates.start_date:
        raise ValidationError("End date must be on or after the start date")

    reg_start, reg_end = dates.registration_start_date, dates.registration_end_date
    if reg_start and reg_start > dates.start_date:
        raise ValidationError("Registration start date cannot be after the event start date")
    if reg_start and reg_end and reg_end < reg_start:
        raise ValidationError("Registration end date cannot be before the registration start date")
    if reg_end and reg_end > dates.end_date:
        raise ValidationError("Registration end date cannot be after the event end date")


class EventService:
    """Use case: event lifecycle (create, update, cancel, soft delete) plus fan-out."""

    def __init__(
        self,
        events: EventRepository,
        inscriptions: InscriptionRepository,
        users: UserRepository,
        notifications: NotificationService,
        *,
        strategy_factory: EventStatusStrategyFactory | None = None,
    ):
        self._events = events
        self._inscriptions = inscriptions
        self._users = users
        self._notifications = notifications
        self._factory = strategy_factory or EventStatusStrategyFactory()

    def list_events(self) -> Sequence[Event]:
        return self._events.list_active()

    def count_events(self) -> int:
        return self._events.count_active()

    def get_event(self, event_id: int) -> Event:
        event = self._events.get(int(event_id))
        if not event:
            raise NotFoundError("Event not found")
        return event

    def notify_registrants(self, event_id: int, notice: Notice) -> int:
        try:
            user_ids = self._inscriptions.list_user_ids_for_event(event_id)
        except Exception:
            logger.exception("Could not load registrants of event %s", event_id)
            return 0
        return self._notifications.notify_many(user_ids, notice.type, notice.message, related_event_id=event_id)

    def create_event(self, payload: Mapping[str, Any], *, now: Optional[datetime] = None) -> Event:
        today = (now or now_local()).date()

        title = require_non_empty(payload.get("title_event"), "Title")
        dates = EventDates(
            start_date=parse_date_field(payload.get("start_date"), "Start date", required=True),
            end_date=parse_date_field(payload.get("end_date"), "End date", required=True),
            registration_start_date=parse_date_field(payload.get("registration_start_date"), "Registration start date"),
            registration_end_date=parse_date_field(payload.get("registration_end_date"), "Registration end date"),
        )
        if dates.start_date < today:
            raise ValidationError("Start date cannot be in the past")
        check_event_dates(dates)

        status = self._factory.resolve(today=today, dates=dates)
        new_id = self._events.create(
            NewEvent(
                title_event=title,
                description=optional_text(payload.get("description")),
                dates=dates,
                status=status,
            )
        )
        logger.info("Event %s created with status %s", new_id, status.value)

        notice = created_notice(title)
        try:
            employee_ids = self._users.list_ids_by_role(RoleName.EMPLOYEE.value)
            self._notifications.notify_many(employee_ids, notice.type, notice.message, related_event_id=new_id)
        except Exception:
            logger.exception("New-event fan-out failed for event %s", new_id)

        return self.get_event(new_id)

    def update_event(self, event_id: int, payload: Mapping[str, Any], *, now: Optional[datetime] = None) -> Event:
        today = (now or now_local()).date()
        event = self.get_event(event_id)
        changes: dict[str, Any] = {}

        if "title_event" in payload:
            changes["title_event"] = require_non_empty(payload.get("title_event"), "Title")
        if "description" in payload:
            changes["description"] = optional_text(payload.get("description"))

        merged: dict[str, Optional[date]] = {
            "start_date": event.start_date,
            "end_date": event.end_date,
            "registration_start_date": event.registration_start_date,
            "registration_end_date": event.registration_end_date,
        }
        for key, label in _DATE_FIELDS.items():
            if key in payload:
                required = key in ("start_date", "end_date")
                merged[key] = parse_date_field(payload.get(key), label, required=required)
                changes[key] = merged[key]
        dates = EventDates(**merged)
        check_event_dates(dates)

        override = None
        raw_status = payload.get("status")
        if raw_status not in (None, ""):
            override = EventStatus.parse(raw_status)
            if override is None:
                logger.warning("Ignoring unknown status override %r for event %s", raw_status, event.id_event)

        new_status = self._factory.resolve(today=today, dates=dates, current=event.status, override=override)
        changes["status"] = new_status
        self._events.update(event.id_event, changes)
        updated = self.get_event(event.id_event)

        notice = change_notice(
            title=updated.title_event,
            old_status=event.status,
            new_status=new_status,
            old_title=event.title_event,
        )
        self.notify_registrants(updated.id_event, notice)
        return updated

    def cancel_event(self, event_id: int, *, now: Optional[datetime] = None) -> Event:
        return self.update_event(event_id, {"status": EventStatus.CANCELLED.value}, now=now)

    def delete_event(self, *, actor_id: Optional[int], event_id: int, now: Optional[datetime] = None) -> None:
        if actor_id is None:
            raise AuthenticationError("An authenticated actor is required")
        event = self.get_event(event_id)

        self.notify_registrants(event.id_event, removed_notice(event.title_event))
        if not self._events.soft_delete(event.id_event, deleted_by=int(actor_id), deleted_at=now or now_local()):
            raise NotFoundError("Event not found")
        logger.info("Event %s soft-deleted by %s", event.id_event, actor_id)

    def registered_events(self, user_id: int) -> Sequence[RegisteredEvent]:
        return self._events.list_registered_by_user(int(user_id))

    def registered_summary(self, user_id: int, *, now: Optional[datetime] = None) -> dict[str, list[dict]]:
        """The user's registered events grouped by where they sit on the calendar."""
        today = (now or now_local()).date()
        groups: dict[str, list[RegisteredEvent]] = {"upcoming": [], "ongoing": [], "finished": [], "cancelled": []}

        for item in self.registered_events(user_id):
            event = item.event
            if event.status == EventStatus.CANCELLED:
                groups["cancelled"].append(item)
            elif event.end_date < today:
                groups["finished"].append(item)
            elif event.start_date <= today:
                groups["ongoing"].append(item)
            else:
                groups["upcoming"].append(item)

        for key, items in groups.items():
            items.sort(key=lambda i: i.event.start_date, reverse=(key == "finished"))
        return {key: [i.to_dict() for i in items] for key, items in groups.items()}
