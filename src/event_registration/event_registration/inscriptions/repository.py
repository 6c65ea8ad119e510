from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import FieldResponse, Inscription


class InscriptionRepository(Protocol):
    """Storage for inscriptions and their field responses."""

    def get(self, inscription_id: int) -> Optional[Inscription]:
        raise NotImplementedError

    def get_for_user_and_event(self, user_id: int, event_id: int) -> Optional[Inscription]:
        raise NotImplementedError

    def create(self, *, user_id: int, event_id: int, created_at: datetime) -> int:
        """Raises ConflictError when the (user, event) pair is already registered."""
        raise NotImplementedError

    def delete(self, inscription_id: int) -> bool:
        """Removes the inscription; its responses go with it."""
        raise NotImplementedError

    def list_for_event(self, event_id: int) -> Sequence[Inscription]:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[Inscription]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Inscription]:
        raise NotImplementedError

    def list_user_ids_for_event(self, event_id: int) -> Sequence[int]:
        raise NotImplementedError

    def list_responses(self, inscription_id: int) -> Sequence[FieldResponse]:
        raise NotImplementedError

    def list_responses_for_event(self, event_id: int) -> Sequence[FieldResponse]:
        raise NotImplementedError

    def upsert_response(
        self,
        *,
        inscription_id: int,
        field_id: int,
        response_text: Optional[str],
        response_file_path: Optional[str],
    ) -> FieldResponse:
        """Overwrite the (inscription, field) answer if present, else create it."""
        raise NotImplementedError
