from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date.

    Full ISO timestamps ("2025-03-10T00:00:00.000Z") are accepted too; only the
    calendar part is kept.
    """
    return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()


def parse_date_field(value: Any, field_name: str, *, required: bool = False) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValidationError(f"{field_name} is required")
        return None
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid date (YYYY-MM-DD)")


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def to_iso(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)
