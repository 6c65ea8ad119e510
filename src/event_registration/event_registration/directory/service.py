from __future__ import annotations

from typing import Sequence

from ..common.validators import require_non_empty
from ..core.enums import DepartmentCode, RoleName
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import Department, Role
from .repository import DepartmentRepository, RoleRepository


class DirectoryService:
    """Use case: maintain the role and department lookup tables."""

    def __init__(self, roles: RoleRepository, departments: DepartmentRepository):
        self._roles = roles
        self._departments = departments

    @staticmethod
    def _role_name(value: str) -> str:
        name = require_non_empty(value, "Role name").lower()
        if name not in {r.value for r in RoleName}:
            allowed = ", ".join(r.value for r in RoleName)
            raise ValidationError(f"Role name must be one of: {allowed}")
        return name

    @staticmethod
    def _department_name(value: str) -> str:
        name = require_non_empty(value, "Department name").upper()
        if name not in {d.value for d in DepartmentCode}:
            allowed = ", ".join(d.value for d in DepartmentCode)
            raise ValidationError(f"Department must be one of: {allowed}")
        return name

    # Roles
    def list_roles(self) -> Sequence[Role]:
        return self._roles.list_all()

    def get_role(self, id_role: int) -> Role:
        role = self._roles.get_by_id(int(id_role))
        if not role:
            raise NotFoundError("Role not found")
        return role

    def create_role(self, *, name: str) -> Role:
        name = self._role_name(name)
        if self._roles.get_by_name(name):
            raise ConflictError("Role already exists")
        new_id = self._roles.create(name)
        return Role(id_role=new_id, name=name)

    def update_role(self, id_role: int, *, name: str) -> Role:
        role = self.get_role(id_role)
        name = self._role_name(name)
        if name == role.name:
            return role
        if self._roles.count_users(role.id_role) > 0:
            raise ValidationError("Role is assigned to users and cannot be renamed")
        if self._roles.get_by_name(name):
            raise ConflictError("Role already exists")
        self._roles.rename(role.id_role, name)
        return Role(id_role=role.id_role, name=name)

    def delete_role(self, id_role: int) -> None:
        role = self.get_role(id_role)
        if self._roles.count_users(role.id_role) > 0:
            raise ValidationError("Cannot delete role: users are still assigned to it")
        self._roles.delete(role.id_role)

    # Departments
    def list_departments(self) -> Sequence[Department]:
        return self._departments.list_all()

    def get_department(self, id_departement: int) -> Department:
        department = self._departments.get_by_id(int(id_departement))
        if not department:
            raise NotFoundError("Department not found")
        return department

    def create_department(self, *, name: str) -> Department:
        name = self._department_name(name)
        if self._departments.get_by_name(name):
            raise ConflictError("Department already exists")
        new_id = self._departments.create(name)
        return Department(id_departement=new_id, name=name)
