from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import RoleName


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object, no DB access. `role_name` and `departement_name` are
    joined in by the repository for convenience.
    """

    id_user: int
    first_name: str
    last_name: str
    username: str
    password_hash: str
    id_role: int
    role_name: Optional[str] = None
    id_departement: Optional[int] = None
    departement_name: Optional[str] = None
    birth_date: Optional[date] = None
    registration_number: Optional[str] = None
    profile_picture_url: Optional[str] = None
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return (self.role_name or "").lower() == RoleName.ADMIN.value

    def to_dict(self) -> dict:
        return {
            "id_user": self.id_user,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "username": self.username,
            "birth_date": to_iso(self.birth_date),
            "registration_number": self.registration_number,
            "profile_picture_url": self.profile_picture_url,
            "role": {"id_role": self.id_role, "name": self.role_name},
            "departement": (
                {"id_departement": self.id_departement, "name": self.departement_name}
                if self.id_departement is not None
                else None
            ),
            "created_at": to_iso(self.created_at),
        }


@dataclass(frozen=True)
class NewUser:
    first_name: str
    last_name: str
    username: str
    password_hash: str
    id_role: int
    id_departement: Optional[int]
    birth_date: Optional[date] = None
    registration_number: Optional[str] = None


@dataclass(frozen=True)
class BulkItemResult:
    registration_number: str
    status: str
    id_user: Optional[int] = None
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        out = {"registration_number": self.registration_number, "status": self.status}
        if self.id_user is not None:
            out["id_user"] = self.id_user
        if self.reason:
            out["reason"] = self.reason
        return out
