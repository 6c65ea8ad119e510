from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import NotificationType
from .model import Notification


class NotificationRepository(Protocol):
    def create(
        self,
        *,
        user_id: int,
        type: NotificationType,
        message: str,
        related_event_id: Optional[int] = None,
    ) -> int:
        raise NotImplementedError

    def list_for_user(self, user_id: int, *, limit: int, unread_only: bool = False) -> Sequence[Notification]:
        """Newest first."""
        raise NotImplementedError

    def count_unread(self, user_id: int) -> int:
        raise NotImplementedError

    def mark_read(self, user_id: int, notification_id: int) -> bool:
        """False when the notification does not exist or belongs to someone else."""
        raise NotImplementedError

    def mark_all_read(self, user_id: int) -> int:
        raise NotImplementedError
