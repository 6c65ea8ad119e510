from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..core.constants import DEFAULT_NOTIFICATION_LIMIT
from ..core.enums import NotificationType
from ..core.exceptions import NotFoundError
from ..users.repository import UserRepository
from .dispatch import InlineDispatcher
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationPage:
    notifications: Sequence[Notification]
    unread_count: int

    def to_dict(self) -> dict:
        return {
            "notifications": [n.to_dict() for n in self.notifications],
            "unreadCount": self.unread_count,
        }


class NotificationService:
    """Best-effort, per-user notification records.

    Delivery never raises: a failure for one recipient is logged and the
    triggering operation carries on.
    """

    def __init__(self, notifications: NotificationRepository, users: UserRepository, *, dispatcher=None):
        self._notifications = notifications
        self._users = users
        self._dispatcher = dispatcher or InlineDispatcher()

    def _deliver(
        self,
        user_id: int,
        notice_type: NotificationType,
        message: str,
        related_event_id: Optional[int],
    ) -> Optional[int]:
        try:
            if not self._users.get_by_id(int(user_id)):
                logger.warning("Notification %s skipped: user %s not found", notice_type.value, user_id)
                return None
            return self._notifications.create(
                user_id=int(user_id),
                type=notice_type,
                message=message,
                related_event_id=related_event_id,
            )
        except Exception:
            logger.exception("Failed to create %s notification for user %s", notice_type.value, user_id)
            return None

    def notify(
        self,
        user_id: int,
        notice_type: NotificationType,
        message: str,
        *,
        related_event_id: Optional[int] = None,
    ) -> Optional[int]:
        """Returns the new id when delivered inline; None on failure or async delivery."""
        try:
            return self._dispatcher.submit(self._deliver, user_id, notice_type, message, related_event_id)
        except Exception:
            logger.exception("Could not dispatch %s notification for user %s", notice_type.value, user_id)
            return None

    def notify_many(
        self,
        user_ids: Iterable[int],
        notice_type: NotificationType,
        message: str,
        *,
        related_event_id: Optional[int] = None,
    ) -> int:
        """Notify each recipient independently; returns how many were delivered inline."""
        delivered = 0
        for user_id in user_ids:
            if self.notify(user_id, notice_type, message, related_event_id=related_event_id) is not None:
                delivered += 1
        return delivered

    def list_for_user(
        self,
        user_id: int,
        *,
        limit: int = DEFAULT_NOTIFICATION_LIMIT,
        unread_only: bool = False,
    ) -> NotificationPage:
        limit = max(1, int(limit))
        return NotificationPage(
            notifications=self._notifications.list_for_user(int(user_id), limit=limit, unread_only=unread_only),
            unread_count=self._notifications.count_unread(int(user_id)),
        )

    def mark_read(self, user_id: int, notification_id: int) -> None:
        if not self._notifications.mark_read(int(user_id), int(notification_id)):
            raise NotFoundError("Notification not found or not owned by user")

    def mark_all_read(self, user_id: int) -> int:
        return self._notifications.mark_all_read(int(user_id))
