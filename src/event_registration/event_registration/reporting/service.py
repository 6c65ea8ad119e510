from __future__ import annotations

import io
import logging
from typing import Sequence

import pandas as pd

from ..core.exceptions import NotFoundError
from ..events.repository import EventRepository
from ..forms.repository import FormRepository
from ..inscriptions.repository import InscriptionRepository
from ..users.repository import UserRepository
from .model import DailyRegistrationCount, DepartmentRegistrationCount, EventRegistrationCount
from .repository import ReportRepository

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
BASE_COLUMNS = ("Inscription", "Username", "Name", "Department", "Registered at")


def _field_headers(fields) -> dict[int, str]:
    seen: set[str] = set(BASE_COLUMNS)
    headers: dict[int, str] = {}
    for form_field in fields:
        header = form_field.label
        if header in seen:
            header = f"{header} ({form_field.id_field})"
        seen.add(header)
        headers[form_field.id_field] = header
    return headers


class ReportService:
    """Admin dashboard aggregates and spreadsheet exports."""

    def __init__(
        self,
        reports: ReportRepository,
        events: EventRepository,
        users: UserRepository,
        inscriptions: InscriptionRepository,
        forms: FormRepository,
    ):
        self._reports = reports
        self._events = events
        self._users = users
        self._inscriptions = inscriptions
        self._forms = forms

    def registrations_per_event(self) -> Sequence[EventRegistrationCount]:
        return self._reports.registrations_per_event()

    def registrations_over_time(self) -> Sequence[DailyRegistrationCount]:
        return self._reports.registrations_over_time()

    def registrations_by_department(self) -> Sequence[DepartmentRegistrationCount]:
        return self._reports.registrations_by_department()

    def summary(self) -> dict:
        return {
            "users": self._users.count_active(),
            "events": self._events.count_active(),
            "registrations": self._reports.count_registrations(),
        }

    def registrations_frame(self, event_id: int) -> pd.DataFrame:
        """One row per inscription, one column per form field (in form order)."""
        event = self._events.get(int(event_id))
        if not event:
            raise NotFoundError("Event not found")

        fields = sorted(self._forms.list_fields(event.id_event), key=lambda f: f.sequence)
        answers: dict[tuple[int, int], str] = {}
        for response in self._inscriptions.list_responses_for_event(event.id_event):
            value = response.response_file_path or response.response_text or ""
            answers[(response.id_inscription, response.id_field)] = value

        headers = _field_headers(fields)
        rows = []
        for inscription in self._inscriptions.list_for_event(event.id_event):
            row = {
                "Inscription": inscription.id_inscription,
                "Username": inscription.username or "",
                "Name": " ".join(p for p in (inscription.first_name, inscription.last_name) if p),
                "Department": inscription.departement_name or "",
                "Registered at": inscription.created_at.strftime("%Y-%m-%d %H:%M") if inscription.created_at else "",
            }
            for form_field in fields:
                row[headers[form_field.id_field]] = answers.get((inscription.id_inscription, form_field.id_field), "")
            rows.append(row)

        columns = list(BASE_COLUMNS) + [headers[f.id_field] for f in fields]
        return pd.DataFrame(rows, columns=columns)

    def export_event_registrations_xlsx(self, event_id: int) -> io.BytesIO:
        df = self.registrations_frame(event_id)
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Registrations")
        output.seek(0)
        logger.info("Exported %s registrations of event %s", len(df), event_id)
        return output
