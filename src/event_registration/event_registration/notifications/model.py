from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import NotificationType


@dataclass(frozen=True)
class Notification:
    id_notification: int
    id_user: int
    type: NotificationType
    message: str
    related_event_id: Optional[int] = None
    is_read: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id_notification": self.id_notification,
            "id_user": self.id_user,
            "type": self.type.value,
            "message": self.message,
            "related_event_id": self.related_event_id,
            "is_read": self.is_read,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }
