from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import EventStatus
from .model import Event, NewEvent, RegisteredEvent


class EventRepository(Protocol):
    """Repository interface for Event. Default reads skip soft-deleted rows."""

    def get(self, event_id: int, *, include_deleted: bool = False) -> Optional[Event]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Event]:
        raise NotImplementedError

    def count_active(self) -> int:
        raise NotImplementedError

    def list_not_cancelled(self) -> Sequence[Event]:
        """Non-deleted events whose status is not cancelled (sweep input)."""
        raise NotImplementedError

    def list_registered_by_user(self, user_id: int) -> Sequence[RegisteredEvent]:
        raise NotImplementedError

    def create(self, event: NewEvent) -> int:
        raise NotImplementedError

    def update(self, event_id: int, changes: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def update_status(self, event_id: int, status: EventStatus) -> bool:
        raise NotImplementedError

    def soft_delete(self, event_id: int, *, deleted_by: int, deleted_at: datetime) -> bool:
        raise NotImplementedError
