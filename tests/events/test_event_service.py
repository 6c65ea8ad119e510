from __future__ import annotations

from datetime import datetime

import pytest

from src.event_registration.event_registration.core.enums import EventStatus, NotificationType
from src.event_registration.event_registration.core.exceptions import NotFoundError, ValidationError

NOW = datetime(2025, 2, 20, 10, 0)

PAYLOAD = {
    "title_event": "Spring Hackathon",
    "description": "Two days of building",
    "start_date": "2025-03-10",
    "end_date": "2025-03-12",
    "registration_start_date": "2025-03-01",
    "registration_end_date": "2025-03-05",
}


def _plain(title, start, end):
    return {"title_event": title, "start_date": start, "end_date": end}


def _types_for(db, user_id):
    return [n.type for n in db.notifications.values() if n.id_user == user_id]


def test_create_event_derives_upcoming_and_notifies_employees(container, db, make_user, admin):
    alice = make_user("alice")
    bob = make_user("bob")

    event = container.event_service.create_event(PAYLOAD, now=NOW)

    assert event.status == EventStatus.UPCOMING
    assert _types_for(db, alice.id_user) == [NotificationType.EVENT_CREATED]
    assert _types_for(db, bob.id_user) == [NotificationType.EVENT_CREATED]
    assert _types_for(db, admin.id_user) == []


@pytest.mark.parametrize(
    "changes, message",
    [
        ({"start_date": "2025-02-19"}, "Start date cannot be in the past"),
        ({"end_date": "2025-03-09"}, "End date must be on or after the start date"),
        ({"registration_start_date": "2025-03-11"}, "Registration start date cannot be after the event start date"),
        ({"registration_end_date": "2025-02-28"}, "Registration end date cannot be before the registration start date"),
        ({"registration_end_date": "2025-03-13"}, "Registration end date cannot be after the event end date"),
        ({"title_event": "  "}, "Title is required"),
        ({"start_date": "10/03/2025"}, "Start date"),
    ],
)
def test_create_event_rejects_bad_input(container, db, changes, message):
    with pytest.raises(ValidationError) as exc:
        container.event_service.create_event({**PAYLOAD, **changes}, now=NOW)

    assert message in str(exc.value)
    assert db.events == {}


def test_create_event_start_today_is_allowed(container):
    event = container.event_service.create_event(
        {"title_event": "Today", "start_date": "2025-02-20", "end_date": "2025-02-20"}, now=NOW
    )

    assert event.status == EventStatus.OPEN


def test_update_status_change_notifies_registrants(container, db, make_user):
    alice = make_user("alice")
    event = container.event_service.create_event(PAYLOAD, now=NOW)
    container.inscription_service.register(user_id=alice.id_user, event_id=event.id_event, now=NOW)
    db.notifications.clear()

    updated = container.event_service.update_event(
        event.id_event, {"registration_start_date": "2025-02-15"}, now=NOW
    )

    assert updated.status == EventStatus.OPEN
    notes = [n for n in db.notifications.values() if n.id_user == alice.id_user]
    assert len(notes) == 1
    assert notes[0].type == NotificationType.EVENT_UPDATED
    assert "now open" in notes[0].message


def test_update_title_only_sends_rename_message(container, db, make_user):
    alice = make_user("alice")
    event = container.event_service.create_event(PAYLOAD, now=NOW)
    container.inscription_service.register(user_id=alice.id_user, event_id=event.id_event, now=NOW)
    db.notifications.clear()

    container.event_service.update_event(event.id_event, {"title_event": "Summer Hackathon"}, now=NOW)

    (note,) = db.notifications.values()
    assert note.message == 'The event "Spring Hackathon" has been renamed to "Summer Hackathon".'


def test_update_rejects_dates_that_break_ordering(container):
    event = container.event_service.create_event(PAYLOAD, now=NOW)

    with pytest.raises(ValidationError):
        container.event_service.update_event(event.id_event, {"end_date": "2025-03-01"}, now=NOW)

    assert container.event_service.get_event(event.id_event).end_date.isoformat() == "2025-03-12"


def test_unknown_status_override_is_ignored(container):
    event = container.event_service.create_event(PAYLOAD, now=NOW)

    updated = container.event_service.update_event(event.id_event, {"status": "postponed"}, now=NOW)

    assert updated.status == EventStatus.UPCOMING


def test_cancel_is_sticky_and_explicit_status_uncancels(container):
    event = container.event_service.create_event(PAYLOAD, now=NOW)
    open_day = datetime(2025, 3, 3, 9, 0)

    cancelled = container.event_service.cancel_event(event.id_event, now=open_day)
    still = container.event_service.update_event(event.id_event, {"description": "moved"}, now=open_day)
    reopened = container.event_service.update_event(event.id_event, {"status": "open"}, now=open_day)

    assert cancelled.status == EventStatus.CANCELLED
    assert still.status == EventStatus.CANCELLED
    assert reopened.status == EventStatus.OPEN


def test_soft_delete_keeps_row_and_hides_event(container, db, admin, make_user):
    alice = make_user("alice")
    event = container.event_service.create_event(PAYLOAD, now=NOW)
    container.inscription_service.register(user_id=alice.id_user, event_id=event.id_event, now=NOW)
    deleted_at = datetime(2025, 2, 21, 8, 0)

    container.event_service.delete_event(actor_id=admin.id_user, event_id=event.id_event, now=deleted_at)

    row = db.events[event.id_event]
    assert row.is_deleted is True
    assert row.deleted_at == deleted_at
    assert row.deleted_by == admin.id_user
    assert container.event_service.list_events() == []
    assert container.event_service.count_events() == 0
    with pytest.raises(NotFoundError):
        container.event_service.get_event(event.id_event)
    assert _types_for(db, alice.id_user)[-1] == NotificationType.EVENT_CANCELLED


def test_list_events_newest_start_first(container):
    container.event_service.create_event(PAYLOAD, now=NOW)
    container.event_service.create_event(_plain("Later", "2025-04-01", "2025-04-02"), now=NOW)

    assert [e.title_event for e in container.event_service.list_events()] == ["Later", "Spring Hackathon"]


def test_registered_summary_groups_by_calendar(container, make_user):
    alice = make_user("alice")
    service = container.event_service
    past = service.create_event(_plain("Past", "2025-02-20", "2025-02-21"), now=NOW)
    ongoing = service.create_event(_plain("Ongoing", "2025-02-24", "2025-03-02"), now=NOW)
    future = service.create_event(PAYLOAD, now=NOW)
    dropped = service.create_event({**PAYLOAD, "title_event": "Dropped"}, now=NOW)
    for event in (past, ongoing, future, dropped):
        container.inscription_service.register(user_id=alice.id_user, event_id=event.id_event, now=NOW)
    service.cancel_event(dropped.id_event, now=NOW)

    summary = service.registered_summary(alice.id_user, now=datetime(2025, 2, 25, 12, 0))

    assert [e["title"] for e in summary["finished"]] == ["Past"]
    assert [e["title"] for e in summary["ongoing"]] == ["Ongoing"]
    assert [e["title"] for e in summary["upcoming"]] == ["Spring Hackathon"]
    assert [e["title"] for e in summary["cancelled"]] == ["Dropped"]
