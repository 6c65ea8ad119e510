from __future__ import annotations

from datetime import date, datetime

import pandas as pd
import pytest

from src.event_registration.event_registration.core.exceptions import NotFoundError
from src.event_registration.event_registration.reporting.model import DepartmentRegistrationCount

CREATED = datetime(2025, 2, 20, 10, 0)


def _event(title, start, end):
    return {"title_event": title, "start_date": start, "end_date": end}


@pytest.fixture
def populated(container, admin, make_user):
    alice = make_user("alice", department="DRH")
    bob = make_user("bob", department="DFO")
    carol = make_user("carol", department="DRH")
    events = container.event_service
    summit = events.create_event(_event("Summit", "2025-03-10", "2025-03-11"), now=CREATED)
    meetup = events.create_event(_event("Meetup", "2025-03-20", "2025-03-20"), now=CREATED)
    gone = events.create_event(_event("Gone", "2025-03-25", "2025-03-25"), now=CREATED)

    register = container.inscription_service.register
    register(user_id=alice.id_user, event_id=summit.id_event, now=datetime(2025, 2, 21, 9, 0))
    register(user_id=bob.id_user, event_id=summit.id_event, now=datetime(2025, 2, 21, 15, 0))
    register(user_id=carol.id_user, event_id=meetup.id_event, now=datetime(2025, 2, 22, 11, 0))
    register(user_id=alice.id_user, event_id=gone.id_event, now=datetime(2025, 2, 22, 12, 0))
    events.delete_event(actor_id=admin.id_user, event_id=gone.id_event, now=CREATED)
    return {"summit": summit, "meetup": meetup, "alice": alice}


def test_dashboard_aggregates_skip_deleted_events(container, populated):
    reports = container.report_service

    assert [r.to_dict() for r in reports.registrations_per_event()] == [
        {"eventId": populated["summit"].id_event, "eventName": "Summit", "registrationcount": 2},
        {"eventId": populated["meetup"].id_event, "eventName": "Meetup", "registrationcount": 1},
    ]
    assert [(r.day, r.count) for r in reports.registrations_over_time()] == [
        (date(2025, 2, 21), 2),
        (date(2025, 2, 22), 1),
    ]
    assert {r.department_name: r.count for r in reports.registrations_by_department()} == {"DRH": 2, "DFO": 1}
    assert reports.summary() == {"users": 4, "events": 2, "registrations": 3}


def test_department_without_name_is_shown_as_dash():
    assert DepartmentRegistrationCount(None, 3).to_dict() == {"departmentName": "-", "registrationcount": 3}


def test_registrations_frame_has_one_column_per_field(container, populated):
    summit = populated["summit"]
    alice = populated["alice"]
    fields = container.form_service.set_fields(
        summit.id_event,
        [{"label": "Team", "type": "text"}, {"label": "Team", "type": "text"}, {"label": "Name", "type": "text"}],
    )
    inscription = container.inscription_service.my_inscription(user_id=alice.id_user, event_id=summit.id_event)
    container.inscription_service.submit_responses(
        user_id=alice.id_user,
        inscription_id=inscription.id_inscription,
        entries=[{"id_field": fields[0].id_field, "response_text": "Blue"}],
    )

    frame = container.report_service.registrations_frame(summit.id_event)

    assert list(frame.columns) == [
        "Inscription",
        "Username",
        "Name",
        "Department",
        "Registered at",
        "Team",
        f"Team ({fields[1].id_field})",
        f"Name ({fields[2].id_field})",
    ]
    assert list(frame["Username"]) == ["alice", "bob"]
    first = frame.iloc[0]
    assert (first["Name"], first["Department"], first["Registered at"]) == ("Alice Tester", "DRH", "2025-02-21 09:00")
    assert (first["Team"], first[f"Team ({fields[1].id_field})"]) == ("Blue", "")


def test_xlsx_export_round_trips_through_pandas(container, populated):
    output = container.report_service.export_event_registrations_xlsx(populated["summit"].id_event)

    frame = pd.read_excel(output, sheet_name="Registrations", engine="openpyxl")
    assert list(frame["Username"]) == ["alice", "bob"]


def test_export_of_unknown_event_is_not_found(container):
    with pytest.raises(NotFoundError):
        container.report_service.registrations_frame(404)
