from __future__ import annotations

import dataclasses
from collections import Counter
from datetime import datetime
from itertools import count

import pytest

from src.event_registration.event_registration.container import Repositories, wire_services
from src.event_registration.event_registration.core.enums import EventStatus
from src.event_registration.event_registration.core.exceptions import ConflictError
from src.event_registration.event_registration.directory.model import Department, Role
from src.event_registration.event_registration.events.model import Event, RegisteredEvent
from src.event_registration.event_registration.forms.model import DropdownOption, FieldType, FormField
from src.event_registration.event_registration.inscriptions.model import FieldResponse, Inscription
from src.event_registration.event_registration.main import create_app
from src.event_registration.event_registration.notifications.model import Notification
from src.event_registration.event_registration.reporting.model import (
    DailyRegistrationCount,
    DepartmentRegistrationCount,
    EventRegistrationCount,
)
from src.event_registration.event_registration.users.model import User

DEFAULT_PASSWORD = "secret123"
FIELD_TYPES = ("text", "number", "file", "date", "checkbox", "radio")


class FakeDB:
    """Shared in-memory tables behind the fake repositories."""

    def __init__(self):
        self._ids: dict[str, count] = {}
        self.roles = {1: Role(1, "admin"), 2: Role(2, "employee")}
        self.departments = {i: Department(i, code) for i, code in enumerate(("DDD", "DSSI", "DRH", "DFO"), start=1)}
        self.field_types = {i: FieldType(i, name) for i, name in enumerate(FIELD_TYPES, start=1)}
        for table, rows in (("roles", self.roles), ("departments", self.departments), ("field_types", self.field_types)):
            self._ids[table] = count(len(rows) + 1)
        self.users: dict[int, dict] = {}
        self.events: dict[int, Event] = {}
        self.fields: dict[int, dict] = {}
        self.options: dict[int, DropdownOption] = {}
        self.inscriptions: dict[int, dict] = {}
        self.responses: dict[int, FieldResponse] = {}
        self.notifications: dict[int, Notification] = {}

    def next_id(self, table: str) -> int:
        return next(self._ids.setdefault(table, count(1)))

    def user(self, user_id: int) -> User:
        row = self.users[user_id]
        department = self.departments.get(row["id_departement"]) if row["id_departement"] else None
        return User(
            role_name=self.roles[row["id_role"]].name,
            departement_name=department.name if department else None,
            **row,
        )


class FakeRoleRepository:
    def __init__(self, db: FakeDB):
        self._db = db

    def list_all(self):
        return sorted(self._db.roles.values(), key=lambda r: r.id_role)

    def get_by_id(self, id_role):
        return self._db.roles.get(int(id_role))

    def get_by_name(self, name):
        return next((r for r in self._db.roles.values() if r.name.lower() == str(name).lower()), None)

    def create(self, name):
        new_id = self._db.next_id("roles")
        self._db.roles[new_id] = Role(new_id, name)
        return new_id

    def rename(self, id_role, name):
        if id_role not in self._db.roles:
            return False
        self._db.roles[id_role] = Role(id_role, name)
        return True

    def delete(self, id_role):
        return self._db.roles.pop(id_role, None) is not None

    def count_users(self, id_role):
        return sum(1 for row in self._db.users.values() if row["id_role"] == id_role)


class FakeDepartmentRepository:
    def __init__(self, db: FakeDB):
        self._db = db

    def list_all(self):
        return sorted(self._db.departments.values(), key=lambda d: d.name)

    def get_by_id(self, id_departement):
        return self._db.departments.get(int(id_departement))

    def get_by_name(self, name):
        return next((d for d in self._db.departments.values() if d.name == name), None)

    def create(self, name):
        new_id = self._db.next_id("departments")
        self._db.departments[new_id] = Department(new_id, name)
        return new_id


class FakeUserRepository:
    def __init__(self, db: FakeDB):
        self._db = db

    def _find(self, predicate, include_deleted):
        for user_id, row in self._db.users.items():
            if predicate(row) and (include_deleted or not row["is_deleted"]):
                return self._db.user(user_id)
        return None

    def get_by_id(self, user_id, *, include_deleted=False):
        return self._find(lambda r: r["id_user"] == int(user_id), include_deleted)

    def get_by_username(self, username, *, include_deleted=False):
        return self._find(lambda r: r["username"] == username, include_deleted)

    def get_by_registration_number(self, registration_number, *, include_deleted=False):
        return self._find(lambda r: r["registration_number"] == registration_number, include_deleted)

    def list_active(self):
        users = [self._db.user(uid) for uid, row in self._db.users.items() if not row["is_deleted"]]
        return sorted(users, key=lambda u: (u.last_name, u.first_name))

    def list_ids_by_role(self, role_name):
        return [u.id_user for u in self.list_active() if (u.role_name or "").lower() == role_name.lower()]

    def count_active(self):
        return len(self.list_active())

    def create(self, user):
        for row in self._db.users.values():
            if row["username"] == user.username or (
                user.registration_number and row["registration_number"] == user.registration_number
            ):
                raise ConflictError("Username or registration number already exists")
        new_id = self._db.next_id("users")
        self._db.users[new_id] = dict(
            id_user=new_id,
            created_at=datetime(2025, 1, 1, 9, 0),
            profile_picture_url=None,
            is_deleted=False,
            deleted_at=None,
            deleted_by=None,
            **dataclasses.asdict(user),
        )
        return new_id

    def update(self, user_id, changes):
        row = self._db.users.get(int(user_id))
        if not row or row["is_deleted"]:
            return False
        row.update(changes)
        return True

    def soft_delete(self, user_id, *, deleted_by, deleted_at):
        row = self._db.users.get(int(user_id))
        if not row or row["is_deleted"]:
            return False
        row.update(is_deleted=True, deleted_by=deleted_by, deleted_at=deleted_at)
        return True


class FakeEventRepository:
    def __init__(self, db: FakeDB):
        self._db = db

    def get(self, event_id, *, include_deleted=False):
        event = self._db.events.get(int(event_id))
        if not event or (event.is_deleted and not include_deleted):
            return None
        return event

    def list_active(self):
        events = [e for e in self._db.events.values() if not e.is_deleted]
        return sorted(events, key=lambda e: e.start_date, reverse=True)

    def count_active(self):
        return len(self.list_active())

    def list_not_cancelled(self):
        return [e for e in self.list_active() if e.status != EventStatus.CANCELLED]

    def list_registered_by_user(self, user_id):
        out = []
        for row in self._db.inscriptions.values():
            event = self.get(row["id_event"])
            if row["id_user"] == int(user_id) and event:
                out.append(RegisteredEvent(event=event, registered_at=row["created_at"]))
        return out

    def create(self, event):
        new_id = self._db.next_id("events")
        self._db.events[new_id] = Event(
            id_event=new_id,
            title_event=event.title_event,
            description=event.description,
            start_date=event.dates.start_date,
            end_date=event.dates.end_date,
            registration_start_date=event.dates.registration_start_date,
            registration_end_date=event.dates.registration_end_date,
            status=event.status,
        )
        return new_id

    def update(self, event_id, changes):
        event = self.get(event_id)
        if not event:
            return False
        self._db.events[event.id_event] = dataclasses.replace(event, **changes)
        return True

    def update_status(self, event_id, status):
        return self.update(event_id, {"status": status})

    def soft_delete(self, event_id, *, deleted_by, deleted_at):
        event = self.get(event_id)
        if not event:
            return False
        self._db.events[event.id_event] = dataclasses.replace(
            event, is_deleted=True, deleted_by=deleted_by, deleted_at=deleted_at
        )
        return True


class FakeFormRepository:
    def __init__(self, db: FakeDB):
        self._db = db

    def _to_field(self, field_id):
        row = self._db.fields[field_id]
        options = tuple(sorted((o for o in self._db.options.values() if o.id_field == field_id), key=lambda o: o.id_option))
        return FormField(
            id_field=field_id,
            id_event=row["id_event"],
            label=row["label"],
            field_type=self._db.field_types[row["id_type"]],
            is_required=row["is_required"],
            sequence=row["sequence"],
            accepted_file_types=row["accepted_file_types"],
            options=options,
        )

    def _has_responses(self, field_ids):
        return any(r.id_field in field_ids for r in self._db.responses.values())

    def _insert(self, event_id, new_field):
        new_id = self._db.next_id("fields")
        self._db.fields[new_id] = dict(
            id_event=event_id,
            label=new_field.label,
            id_type=new_field.id_type,
            is_required=new_field.is_required,
            sequence=new_field.sequence,
            accepted_file_types=new_field.accepted_file_types,
        )
        for value in new_field.options:
            self.add_option(new_id, value=value, is_default=False)
        return new_id

    def _drop_options(self, field_id):
        for option_id in [o.id_option for o in self._db.options.values() if o.id_field == field_id]:
            del self._db.options[option_id]

    def list_types(self):
        return sorted(self._db.field_types.values(), key=lambda t: t.id_type)

    def create_type(self, field_name):
        new_id = self._db.next_id("field_types")
        self._db.field_types[new_id] = FieldType(new_id, field_name)
        return new_id

    def list_fields(self, event_id):
        ids = [fid for fid, row in self._db.fields.items() if row["id_event"] == int(event_id)]
        return sorted((self._to_field(fid) for fid in ids), key=lambda f: f.sequence)

    def get_field(self, field_id):
        return self._to_field(int(field_id)) if int(field_id) in self._db.fields else None

    def replace_fields(self, event_id, fields):
        existing = [f.id_field for f in self.list_fields(event_id)]
        if self._has_responses(existing):
            raise ConflictError("Form fields already have submitted responses and cannot be replaced")
        for field_id in existing:
            self._drop_options(field_id)
            del self._db.fields[field_id]
        for new_field in fields:
            self._insert(int(event_id), new_field)

    def add_field(self, event_id, new_field):
        return self._insert(int(event_id), new_field)

    def update_field(self, field_id, *, label, id_type, is_required, accepted_file_types, options):
        row = self._db.fields.get(int(field_id))
        if row is None:
            return False
        row.update(label=label, id_type=id_type, is_required=is_required, accepted_file_types=accepted_file_types)
        if options is not None:
            self._drop_options(int(field_id))
            for value in options:
                self.add_option(int(field_id), value=value, is_default=False)
        return True

    def delete_field(self, field_id):
        row = self._db.fields.get(int(field_id))
        if row is None:
            return False
        if self._has_responses({int(field_id)}):
            raise ConflictError("Form field has submitted responses and cannot be deleted")
        self._drop_options(int(field_id))
        del self._db.fields[int(field_id)]
        for sequence, remaining in enumerate(self.list_fields(row["id_event"])):
            self._db.fields[remaining.id_field]["sequence"] = sequence
        return True

    def list_options(self, field_id):
        return self._to_field(int(field_id)).options

    def get_option(self, option_id):
        return self._db.options.get(int(option_id))

    def add_option(self, field_id, *, value, is_default):
        new_id = self._db.next_id("options")
        self._db.options[new_id] = DropdownOption(new_id, int(field_id), value, is_default)
        return new_id

    def update_option(self, option_id, *, value, is_default):
        option = self._db.options.get(int(option_id))
        if option is None:
            return False
        self._db.options[option.id_option] = dataclasses.replace(option, value=value, is_default=is_default)
        return True

    def delete_option(self, option_id):
        return self._db.options.pop(int(option_id), None) is not None


class FakeInscriptionRepository:
    def __init__(self, db: FakeDB):
        self._db = db
        self.failing_field_ids: set[int] = set()

    def _to_inscription(self, inscription_id):
        row = self._db.inscriptions[inscription_id]
        user = self._db.user(row["id_user"])
        event = self._db.events[row["id_event"]]
        return Inscription(
            id_inscription=inscription_id,
            id_user=row["id_user"],
            id_event=row["id_event"],
            created_at=row["created_at"],
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            departement_name=user.departement_name,
            event_title=event.title_event,
        )

    def _where(self, predicate):
        return [self._to_inscription(iid) for iid, row in sorted(self._db.inscriptions.items()) if predicate(row)]

    def get(self, inscription_id):
        return self._to_inscription(int(inscription_id)) if int(inscription_id) in self._db.inscriptions else None

    def get_for_user_and_event(self, user_id, event_id):
        found = self._where(lambda r: r["id_user"] == int(user_id) and r["id_event"] == int(event_id))
        return found[0] if found else None

    def create(self, *, user_id, event_id, created_at):
        if self.get_for_user_and_event(user_id, event_id):
            raise ConflictError("User is already registered for this event")
        new_id = self._db.next_id("inscriptions")
        self._db.inscriptions[new_id] = dict(id_user=int(user_id), id_event=int(event_id), created_at=created_at)
        return new_id

    def delete(self, inscription_id):
        if self._db.inscriptions.pop(int(inscription_id), None) is None:
            return False
        for response_id in [r.id_response for r in self._db.responses.values() if r.id_inscription == int(inscription_id)]:
            del self._db.responses[response_id]
        return True

    def list_for_event(self, event_id):
        return self._where(lambda r: r["id_event"] == int(event_id))

    def list_for_user(self, user_id):
        return self._where(lambda r: r["id_user"] == int(user_id))

    def list_all(self):
        return self._where(lambda r: True)

    def list_user_ids_for_event(self, event_id):
        return [
            row["id_user"]
            for row in self._db.inscriptions.values()
            if row["id_event"] == int(event_id) and not self._db.users[row["id_user"]]["is_deleted"]
        ]

    def list_responses(self, inscription_id):
        return sorted(
            (r for r in self._db.responses.values() if r.id_inscription == int(inscription_id)),
            key=lambda r: r.id_field,
        )

    def list_responses_for_event(self, event_id):
        ids = {iid for iid, row in self._db.inscriptions.items() if row["id_event"] == int(event_id)}
        return [r for r in self._db.responses.values() if r.id_inscription in ids]

    def upsert_response(self, *, inscription_id, field_id, response_text, response_file_path):
        if field_id in self.failing_field_ids:
            raise RuntimeError("storage unavailable")
        label = self._db.fields[field_id]["label"]
        for response in self._db.responses.values():
            if response.id_inscription == inscription_id and response.id_field == field_id:
                updated = dataclasses.replace(
                    response, response_text=response_text, response_file_path=response_file_path
                )
                self._db.responses[response.id_response] = updated
                return updated
        new_id = self._db.next_id("responses")
        created = FieldResponse(
            id_response=new_id,
            id_inscription=inscription_id,
            id_field=field_id,
            response_text=response_text,
            response_file_path=response_file_path,
            field_label=label,
        )
        self._db.responses[new_id] = created
        return created


class FakeNotificationRepository:
    def __init__(self, db: FakeDB):
        self._db = db
        self.failing_user_ids: set[int] = set()

    def create(self, *, user_id, type, message, related_event_id=None):
        if user_id in self.failing_user_ids:
            raise RuntimeError("notifications table unavailable")
        new_id = self._db.next_id("notifications")
        self._db.notifications[new_id] = Notification(
            id_notification=new_id,
            id_user=user_id,
            type=type,
            message=message,
            related_event_id=related_event_id,
        )
        return new_id

    def for_user(self, user_id):
        return sorted(
            (n for n in self._db.notifications.values() if n.id_user == int(user_id)),
            key=lambda n: n.id_notification,
            reverse=True,
        )

    def list_for_user(self, user_id, *, limit, unread_only=False):
        items = [n for n in self.for_user(user_id) if not (unread_only and n.is_read)]
        return items[:limit]

    def count_unread(self, user_id):
        return sum(1 for n in self.for_user(user_id) if not n.is_read)

    def mark_read(self, user_id, notification_id):
        notification = self._db.notifications.get(int(notification_id))
        if not notification or notification.id_user != int(user_id):
            return False
        self._db.notifications[notification.id_notification] = dataclasses.replace(notification, is_read=True)
        return True

    def mark_all_read(self, user_id):
        unread = [n for n in self.for_user(user_id) if not n.is_read]
        for notification in unread:
            self._db.notifications[notification.id_notification] = dataclasses.replace(notification, is_read=True)
        return len(unread)


class FakeReportRepository:
    def __init__(self, db: FakeDB):
        self._db = db

    def _live_rows(self):
        return [r for r in self._db.inscriptions.values() if not self._db.events[r["id_event"]].is_deleted]

    def registrations_per_event(self):
        per_event = Counter(r["id_event"] for r in self._live_rows())
        rows = [
            EventRegistrationCount(e.id_event, e.title_event, per_event.get(e.id_event, 0))
            for e in self._db.events.values()
            if not e.is_deleted
        ]
        return sorted(rows, key=lambda r: (-r.count, r.event_name))

    def registrations_over_time(self):
        per_day = Counter(r["created_at"].date() for r in self._live_rows())
        return [DailyRegistrationCount(day, n) for day, n in sorted(per_day.items())]

    def registrations_by_department(self):
        per_department = Counter(self._db.user(r["id_user"]).departement_name for r in self._live_rows())
        return [DepartmentRegistrationCount(name, n) for name, n in per_department.most_common()]

    def count_registrations(self):
        return len(self._live_rows())


@pytest.fixture
def db():
    return FakeDB()


@pytest.fixture
def repos(db):
    return Repositories(
        users=FakeUserRepository(db),
        roles=FakeRoleRepository(db),
        departments=FakeDepartmentRepository(db),
        events=FakeEventRepository(db),
        forms=FakeFormRepository(db),
        inscriptions=FakeInscriptionRepository(db),
        notifications=FakeNotificationRepository(db),
        reports=FakeReportRepository(db),
    )


@pytest.fixture
def container(repos, tmp_path):
    return wire_services(repos, jwt_secret="test-jwt-secret", upload_folder=tmp_path / "uploads")


@pytest.fixture
def make_user(container):
    def _make(username, *, role="employee", department="DRH", registration_number=None, password=DEFAULT_PASSWORD):
        return container.user_service.create_user(
            username=username,
            password=password,
            first_name=username.capitalize(),
            last_name="Tester",
            role_name=role,
            department_name=department,
            registration_number=registration_number,
        )

    return _make


@pytest.fixture
def admin(make_user):
    return make_user("admin", role="admin", department="DSSI")


@pytest.fixture
def app(container):
    flask_app = create_app(container, settings_module="config.testing")
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(container):
    def _headers(user, password=DEFAULT_PASSWORD):
        token = container.auth_service.login(user.username, password).token
        return {"Authorization": f"Bearer {token}"}

    return _headers
