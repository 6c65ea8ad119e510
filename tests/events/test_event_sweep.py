from __future__ import annotations

from datetime import datetime, timedelta

from src.event_registration.event_registration.core.enums import EventStatus, NotificationType
from src.event_registration.event_registration.events.sweep import in_window

CREATED_AT = datetime(2025, 2, 20, 10, 0)

PAYLOAD = {
    "title_event": "Spring Hackathon",
    "start_date": "2025-03-10",
    "end_date": "2025-03-12",
    "registration_start_date": "2025-03-01",
    "registration_end_date": "2025-03-05",
}


def _of_type(db, user_id, notice_type):
    return [n for n in db.notifications.values() if n.id_user == user_id and n.type == notice_type]


def test_in_window_is_inclusive():
    now = datetime(2025, 3, 9, 0, 0)

    assert in_window(datetime(2025, 3, 9, 23, 0), now, (23, 25))
    assert in_window(datetime(2025, 3, 10, 1, 0), now, (23, 25))
    assert not in_window(datetime(2025, 3, 10, 1, 1), now, (23, 25))


def test_lifecycle_upcoming_open_closed_notifies_registrant_once(container, db, make_user):
    event = container.event_service.create_event(PAYLOAD, now=CREATED_AT)
    assert event.status == EventStatus.UPCOMING

    report = container.sweeper.run(now=datetime(2025, 3, 3, 1, 0))
    assert report.status_changes == 1
    assert db.events[event.id_event].status == EventStatus.OPEN
    assert not any(n.type == NotificationType.EVENT_UPDATED for n in db.notifications.values())

    alice = make_user("alice")
    registered_at = datetime(2025, 3, 3, 9, 0)
    container.inscription_service.register(user_id=alice.id_user, event_id=event.id_event, now=registered_at)

    report = container.sweeper.run(now=datetime(2025, 3, 6, 1, 0))

    assert report.status_changes == 1
    assert db.events[event.id_event].status == EventStatus.CLOSED
    updates = _of_type(db, alice.id_user, NotificationType.EVENT_UPDATED)
    assert len(updates) == 1
    assert "now closed" in updates[0].message


def test_sweep_is_idempotent_within_a_day(container, db):
    event = container.event_service.create_event(PAYLOAD, now=CREATED_AT)
    day = datetime(2025, 3, 3, 1, 0)

    container.sweeper.run(now=day)
    second = container.sweeper.run(now=day.replace(hour=13))

    assert second.status_changes == 0
    assert db.events[event.id_event].status == EventStatus.OPEN


def test_cancelled_event_not_recomputed_or_reminded(container, db, make_user):
    alice = make_user("alice")
    event = container.event_service.create_event(PAYLOAD, now=CREATED_AT)
    container.inscription_service.register(user_id=alice.id_user, event_id=event.id_event, now=CREATED_AT)
    container.event_service.cancel_event(event.id_event, now=CREATED_AT)
    db.notifications.clear()

    report = container.sweeper.run(now=datetime(2025, 3, 9, 0, 30))

    assert report.examined == 0
    assert db.events[event.id_event].status == EventStatus.CANCELLED
    assert db.notifications == {}


def test_event_reminder_goes_to_registrants_day_before(container, db, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    event = container.event_service.create_event(PAYLOAD, now=CREATED_AT)
    container.inscription_service.register(user_id=alice.id_user, event_id=event.id_event, now=CREATED_AT)

    report = container.sweeper.run(now=datetime(2025, 3, 9, 0, 30))

    assert report.reminders == 1
    reminders = _of_type(db, alice.id_user, NotificationType.EVENT_REMINDER)
    assert len(reminders) == 1
    assert reminders[0].message == 'Reminder: the event "Spring Hackathon" starts tomorrow!'
    assert _of_type(db, bob.id_user, NotificationType.EVENT_REMINDER) == []


def test_deadline_reminder_goes_to_unregistered_employees(container, db, make_user, admin):
    alice = make_user("alice")
    bob = make_user("bob")
    event = container.event_service.create_event(PAYLOAD, now=CREATED_AT)
    container.inscription_service.register(user_id=alice.id_user, event_id=event.id_event, now=CREATED_AT)

    report = container.sweeper.run(now=datetime(2025, 3, 3, 1, 0))

    assert report.deadline_reminders == 1
    notes = _of_type(db, bob.id_user, NotificationType.REGISTRATION_DEADLINE_REMINDER)
    assert len(notes) == 1
    assert "2025-03-05" in notes[0].message
    assert _of_type(db, alice.id_user, NotificationType.REGISTRATION_DEADLINE_REMINDER) == []
    assert _of_type(db, admin.id_user, NotificationType.REGISTRATION_DEADLINE_REMINDER) == []


def test_one_failing_event_does_not_stop_the_sweep(container, db, repos, monkeypatch):
    broken = container.event_service.create_event(PAYLOAD, now=CREATED_AT)
    healthy = container.event_service.create_event({**PAYLOAD, "title_event": "Healthy"}, now=CREATED_AT)
    original = repos.events.update_status

    def flaky(event_id, status):
        if event_id == broken.id_event:
            raise RuntimeError("lock wait timeout")
        return original(event_id, status)

    monkeypatch.setattr(repos.events, "update_status", flaky)

    report = container.sweeper.run(now=datetime(2025, 3, 3, 1, 0))

    assert report.failures == 1
    assert db.events[healthy.id_event].status == EventStatus.OPEN
    assert db.events[broken.id_event].status == EventStatus.UPCOMING


def test_daily_sweep_at_nine_sends_each_reminder_once(container, db, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    event = container.event_service.create_event(PAYLOAD, now=CREATED_AT)
    container.inscription_service.register(user_id=alice.id_user, event_id=event.id_event, now=CREATED_AT)

    first_morning = datetime(2025, 2, 21, 9, 0)
    for offset in range(19):
        container.sweeper.run(now=first_morning + timedelta(days=offset))

    assert len(_of_type(db, alice.id_user, NotificationType.EVENT_REMINDER)) == 1
    assert len(_of_type(db, bob.id_user, NotificationType.REGISTRATION_DEADLINE_REMINDER)) == 1
    assert _of_type(db, alice.id_user, NotificationType.REGISTRATION_DEADLINE_REMINDER) == []
