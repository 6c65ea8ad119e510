from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_text
from ..core.enums import EventStatus
from ..core.exceptions import AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..events.model import Event
from ..events.notices import confirmation_notice
from ..events.repository import EventRepository
from ..forms.repository import FormRepository
from ..notifications.service import NotificationService
from ..uploads.storage import LocalFileStorage, UploadedFile
from ..users.model import User
from ..users.repository import UserRepository
from .answers import Answer, check_value, collect_answers, validate_answers
from .model import FieldResponse, Inscription, RegistrationResult, ResponseFailure, SubmissionResult
from .repository import InscriptionRepository

logger = logging.getLogger(__name__)

RESPONSES_SUBDIR = "responses"


class InscriptionService:
    """Use case: register to events, answer their forms, cancel registrations."""

    def __init__(
        self,
        inscriptions: InscriptionRepository,
        events: EventRepository,
        users: UserRepository,
        forms: FormRepository,
        notifications: NotificationService,
        *,
        storage: Optional[LocalFileStorage] = None,
    ):
        self._inscriptions = inscriptions
        self._events = events
        self._users = users
        self._forms = forms
        self._notifications = notifications
        self._storage = storage

    def _require_event(self, event_id: int) -> Event:
        event = self._events.get(int(event_id))
        if not event:
            raise NotFoundError("Event not found")
        return event

    def _require_inscription(self, inscription_id: int) -> Inscription:
        inscription = self._inscriptions.get(int(inscription_id))
        if not inscription:
            raise NotFoundError("Inscription not found")
        return inscription

    @staticmethod
    def _require_owner_or_admin(inscription: Inscription, current_user: User) -> None:
        if inscription.id_user != current_user.id_user and not current_user.is_admin:
            raise AuthorizationError("This inscription belongs to another user")

    def _store(self, upload: UploadedFile, *, user_id: int, field_id: int) -> str:
        if self._storage is None:
            raise RuntimeError("File storage is not configured")
        return self._storage.save(upload, subdir=RESPONSES_SUBDIR, prefix=f"u{user_id}-field{field_id}")

    def _save_answer(self, inscription_id: int, user_id: int, answer: Answer) -> FieldResponse:
        if answer.file is not None:
            path = self._store(answer.file, user_id=user_id, field_id=answer.field.id_field)
            return self._inscriptions.upsert_response(
                inscription_id=inscription_id,
                field_id=answer.field.id_field,
                response_text=None,
                response_file_path=path,
            )
        if answer.field.field_type.is_file:
            # A path returned earlier by the upload endpoint.
            return self._inscriptions.upsert_response(
                inscription_id=inscription_id,
                field_id=answer.field.id_field,
                response_text=None,
                response_file_path=optional_text(answer.text),
            )
        return self._inscriptions.upsert_response(
            inscription_id=inscription_id,
            field_id=answer.field.id_field,
            response_text=answer.text,
            response_file_path=None,
        )

    def register(
        self,
        *,
        user_id: Optional[int],
        event_id: int,
        form: Optional[Mapping[str, Any]] = None,
        files: Optional[Mapping[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> RegistrationResult:
        """Create an inscription and its answers.

        The answers are checked against the event's form before anything is
        written. Once the inscription exists, each answer is saved on its own
        and failures are reported back instead of undoing the registration.
        """
        if user_id is None:
            raise AuthenticationError("An authenticated user is required")
        event = self._require_event(event_id)
        if event.status == EventStatus.CANCELLED:
            raise ValidationError("This event has been cancelled")
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        if self._inscriptions.get_for_user_and_event(user.id_user, event.id_event):
            raise ConflictError("User is already registered for this event")

        fields = self._forms.list_fields(event.id_event)
        answers = collect_answers(fields, form, files)
        validate_answers(fields, answers)

        inscription_id = self._inscriptions.create(
            user_id=user.id_user,
            event_id=event.id_event,
            created_at=now or now_local(),
        )
        logger.info("User %s registered to event %s (inscription %s)", user.id_user, event.id_event, inscription_id)

        saved: list[FieldResponse] = []
        failures: list[ResponseFailure] = []
        for answer in sorted(answers.values(), key=lambda a: a.field.sequence):
            if answer.is_blank:
                continue
            try:
                saved.append(self._save_answer(inscription_id, user.id_user, answer))
            except Exception as exc:
                logger.exception(
                    "Could not save answer for field %s of inscription %s", answer.field.id_field, inscription_id
                )
                failures.append(ResponseFailure(answer.field.id_field, str(exc), label=answer.field.label))

        notice = confirmation_notice(event.title_event)
        self._notifications.notify(user.id_user, notice.type, notice.message, related_event_id=event.id_event)

        inscription = self._inscriptions.get(inscription_id) or Inscription(
            id_inscription=inscription_id, id_user=user.id_user, id_event=event.id_event
        )
        return RegistrationResult(inscription=inscription, responses=tuple(saved), failures=tuple(failures))

    def submit_responses(self, *, user_id: int, inscription_id: int, entries: Any) -> SubmissionResult:
        if not isinstance(entries, (list, tuple)):
            raise ValidationError("responses must be an array")
        inscription = self._require_inscription(inscription_id)
        if inscription.id_user != int(user_id):
            raise AuthorizationError("You can only answer your own inscription")

        fields = {f.id_field: f for f in self._forms.list_fields(inscription.id_event)}
        succeeded: list[FieldResponse] = []
        failures: list[ResponseFailure] = []

        for entry in entries:
            raw_id = entry.get("id_field") if isinstance(entry, Mapping) else None
            try:
                field_id = int(raw_id)
            except (TypeError, ValueError):
                failures.append(ResponseFailure(None, "Missing or invalid id_field"))
                continue

            form_field = fields.get(field_id)
            if form_field is None:
                failures.append(ResponseFailure(field_id, "Field does not belong to this event"))
                continue

            text = entry.get("response_text")
            text = None if text is None else str(text)
            file_path = optional_text(entry.get("response_file_path"))
            if file_path is None and form_field.field_type.is_file:
                file_path = optional_text(text)
            if file_path is not None:
                text = None

            if form_field.is_required and file_path is None and Answer(form_field, text=text).is_blank:
                problem = f'The field "{form_field.label}" is required'
                failures.append(ResponseFailure(field_id, problem, label=form_field.label))
                continue

            problem = check_value(form_field, text=text, file_name=file_path)
            if problem:
                failures.append(ResponseFailure(field_id, problem, label=form_field.label))
                continue

            try:
                succeeded.append(
                    self._inscriptions.upsert_response(
                        inscription_id=inscription.id_inscription,
                        field_id=field_id,
                        response_text=text,
                        response_file_path=file_path,
                    )
                )
            except Exception as exc:
                logger.exception("Could not save response for field %s", field_id)
                failures.append(ResponseFailure(field_id, str(exc), label=form_field.label))

        return SubmissionResult(succeeded=tuple(succeeded), failures=tuple(failures))

    def store_response_file(self, *, user_id: int, upload: Optional[UploadedFile]) -> str:
        if upload is None or not (upload.filename or "").strip():
            raise ValidationError("No file uploaded")
        if self._storage is None:
            raise RuntimeError("File storage is not configured")
        return self._storage.save(upload, subdir=RESPONSES_SUBDIR, prefix=f"u{int(user_id)}")

    def _with_responses(self, inscription: Inscription) -> Inscription:
        responses = tuple(self._inscriptions.list_responses(inscription.id_inscription))
        return dataclasses.replace(inscription, responses=responses)

    def get_inscription(self, inscription_id: int, *, current_user: User) -> Inscription:
        inscription = self._require_inscription(inscription_id)
        self._require_owner_or_admin(inscription, current_user)
        return self._with_responses(inscription)

    def my_inscription(self, *, user_id: int, event_id: int) -> Inscription:
        self._require_event(event_id)
        inscription = self._inscriptions.get_for_user_and_event(int(user_id), int(event_id))
        if not inscription:
            raise NotFoundError("You are not registered for this event")
        return self._with_responses(inscription)

    def list_for_event(self, event_id: int) -> Sequence[Inscription]:
        self._require_event(event_id)
        return self._inscriptions.list_for_event(int(event_id))

    def list_for_user(self, user_id: int, *, current_user: User) -> Sequence[Inscription]:
        if int(user_id) != current_user.id_user and not current_user.is_admin:
            raise AuthorizationError("You can only list your own inscriptions")
        return self._inscriptions.list_for_user(int(user_id))

    def list_all(self) -> Sequence[Inscription]:
        return self._inscriptions.list_all()

    def cancel(self, inscription_id: int, *, current_user: User) -> None:
        inscription = self._require_inscription(inscription_id)
        self._require_owner_or_admin(inscription, current_user)
        if not self._inscriptions.delete(inscription.id_inscription):
            raise NotFoundError("Inscription not found")
        logger.info(
            "Inscription %s (user %s, event %s) cancelled by %s",
            inscription.id_inscription,
            inscription.id_user,
            inscription.id_event,
            current_user.id_user,
        )

    def list_responses(self, inscription_id: int, *, current_user: User) -> Sequence[FieldResponse]:
        inscription = self._require_inscription(inscription_id)
        self._require_owner_or_admin(inscription, current_user)
        return self._inscriptions.list_responses(inscription.id_inscription)

    def list_event_responses(self, event_id: int) -> Sequence[FieldResponse]:
        self._require_event(event_id)
        return self._inscriptions.list_responses_for_event(int(event_id))
