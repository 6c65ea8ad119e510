from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Department, Role


class RoleRepository(Protocol):
    """Repository interface for the roles lookup table."""

    def list_all(self) -> Sequence[Role]:
        raise NotImplementedError

    def get_by_id(self, id_role: int) -> Optional[Role]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Role]:
        raise NotImplementedError

    def create(self, name: str) -> int:
        raise NotImplementedError

    def rename(self, id_role: int, name: str) -> bool:
        raise NotImplementedError

    def delete(self, id_role: int) -> bool:
        raise NotImplementedError

    def count_users(self, id_role: int) -> int:
        raise NotImplementedError


class DepartmentRepository(Protocol):
    def list_all(self) -> Sequence[Department]:
        raise NotImplementedError

    def get_by_id(self, id_departement: int) -> Optional[Department]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Department]:
        raise NotImplementedError

    def create(self, name: str) -> int:
        raise NotImplementedError
