from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso


@dataclass(frozen=True)
class FieldResponse:
    id_response: int
    id_inscription: int
    id_field: int
    response_text: Optional[str] = None
    response_file_path: Optional[str] = None
    field_label: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id_response": self.id_response,
            "id_inscription": self.id_inscription,
            "id_field": self.id_field,
            "label": self.field_label,
            "response_text": self.response_text,
            "response_file_path": self.response_file_path,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }


@dataclass(frozen=True)
class Inscription:
    """A user's registration to an event, with the joined display columns."""

    id_inscription: int
    id_user: int
    id_event: int
    created_at: Optional[datetime] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    departement_name: Optional[str] = None
    event_title: Optional[str] = None
    responses: tuple[FieldResponse, ...] = field(default_factory=tuple)

    def to_dict(self, *, with_responses: bool = False) -> dict:
        out = {
            "id_inscription": self.id_inscription,
            "id_user": self.id_user,
            "id_event": self.id_event,
            "created_at": to_iso(self.created_at),
            "user": {
                "id_user": self.id_user,
                "username": self.username,
                "first_name": self.first_name,
                "last_name": self.last_name,
                "departement": self.departement_name,
            },
            "event": {"id_event": self.id_event, "title_event": self.event_title},
        }
        if with_responses:
            out["responses"] = [r.to_dict() for r in self.responses]
        return out


@dataclass(frozen=True)
class ResponseFailure:
    id_field: Optional[int]
    error: str
    label: Optional[str] = None

    def to_dict(self) -> dict:
        out = {"id_field": self.id_field, "error": self.error}
        if self.label:
            out["label"] = self.label
        return out


@dataclass(frozen=True)
class RegistrationResult:
    inscription: Inscription
    responses: tuple[FieldResponse, ...]
    failures: tuple[ResponseFailure, ...] = ()

    @property
    def is_partial(self) -> bool:
        return bool(self.failures)

    def to_dict(self) -> dict:
        out = {
            "message": (
                "Registration saved with some answers not recorded"
                if self.is_partial
                else "Registration successful"
            ),
            "inscription": self.inscription.to_dict(),
            "responses": [r.to_dict() for r in self.responses],
        }
        if self.is_partial:
            out["errors"] = [f.to_dict() for f in self.failures]
        return out


@dataclass(frozen=True)
class SubmissionResult:
    succeeded: tuple[FieldResponse, ...]
    failures: tuple[ResponseFailure, ...] = ()

    @property
    def is_partial(self) -> bool:
        return bool(self.failures)

    def to_dict(self) -> dict:
        if self.is_partial:
            return {
                "message": "Some responses could not be saved",
                "successfulResponses": [r.to_dict() for r in self.succeeded],
                "errors": [f.to_dict() for f in self.failures],
            }
        return {
            "message": "Responses saved successfully",
            "responses": [r.to_dict() for r in self.succeeded],
        }
