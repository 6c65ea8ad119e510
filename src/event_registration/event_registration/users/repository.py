from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import NewUser, User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, not on a concrete database. Default
    reads skip soft-deleted rows; pass include_deleted=True for uniqueness
    checks.
    """

    def get_by_id(self, user_id: int, *, include_deleted: bool = False) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str, *, include_deleted: bool = False) -> Optional[User]:
        raise NotImplementedError

    def get_by_registration_number(self, registration_number: str, *, include_deleted: bool = False) -> Optional[User]:
        raise NotImplementedError

    def list_active(self) -> Sequence[User]:
        raise NotImplementedError

    def list_ids_by_role(self, role_name: str) -> Sequence[int]:
        raise NotImplementedError

    def count_active(self) -> int:
        raise NotImplementedError

    def create(self, user: NewUser) -> int:
        raise NotImplementedError

    def update(self, user_id: int, changes: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def soft_delete(self, user_id: int, *, deleted_by: int, deleted_at: datetime) -> bool:
        raise NotImplementedError
