"""Notification texts for event lifecycle changes."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import EventStatus, NotificationType


@dataclass(frozen=True)
class Notice:
    type: NotificationType
    message: str


def change_notice(
    *,
    title: str,
    old_status: EventStatus,
    new_status: EventStatus,
    old_title: Optional[str] = None,
) -> Notice:
    """Pick the message for an event change.

    Priority: cancelled > other status change > title change > generic update.
    """
    if new_status != old_status and new_status == EventStatus.CANCELLED:
        return Notice(NotificationType.EVENT_CANCELLED, f'The event "{title}" has been cancelled.')

    if new_status != old_status:
        if new_status == EventStatus.OPEN:
            message = f'Registrations for "{title}" are now open.'
        elif new_status == EventStatus.CLOSED:
            message = f'Registrations for "{title}" are now closed.'
        else:
            message = f'The event "{title}" is now {new_status.value}.'
        return Notice(NotificationType.EVENT_UPDATED, message)

    if old_title is not None and old_title != title:
        return Notice(NotificationType.EVENT_UPDATED, f'The event "{old_title}" has been renamed to "{title}".')

    return Notice(NotificationType.EVENT_UPDATED, f'The event "{title}" has been updated.')


def created_notice(title: str) -> Notice:
    return Notice(NotificationType.EVENT_CREATED, f"New event available: {title}")


def removed_notice(title: str) -> Notice:
    return Notice(NotificationType.EVENT_CANCELLED, f'The event "{title}" has been removed.')


def reminder_notice(title: str) -> Notice:
    return Notice(NotificationType.EVENT_REMINDER, f'Reminder: the event "{title}" starts tomorrow!')


def deadline_notice(title: str, registration_end: date) -> Notice:
    return Notice(
        NotificationType.REGISTRATION_DEADLINE_REMINDER,
        f'Registration for "{title}" closes on {registration_end.isoformat()}. Don\'t miss it!',
    )


def confirmation_notice(title: str) -> Notice:
    return Notice(
        NotificationType.REGISTRATION_CONFIRMATION,
        f'Your registration for the event "{title}" has been confirmed.',
    )
