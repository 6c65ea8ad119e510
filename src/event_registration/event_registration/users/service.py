from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import parse_date_field
from ..common.validators import optional_text, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..directory.model import Department, Role
from ..directory.repository import DepartmentRepository, RoleRepository
from ..uploads.storage import LocalFileStorage, UploadedFile
from .model import BulkItemResult, NewUser, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


def verify_password(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password or "")
    except Exception:
        # e.g. placeholder hashes or corrupted values
        return False


class UserService:
    """Use case: manage user accounts (admin side plus self-service)."""

    def __init__(
        self,
        users: UserRepository,
        roles: RoleRepository,
        departments: DepartmentRepository,
        *,
        storage: Optional[LocalFileStorage] = None,
    ):
        self._users = users
        self._roles = roles
        self._departments = departments
        self._storage = storage

    def _resolve_role(self, name: Any) -> Role:
        role_name = require_non_empty(name, "Role")
        role = self._roles.get_by_name(role_name.lower())
        if not role:
            raise ValidationError(f"Role '{role_name}' not found")
        return role

    def _resolve_department(self, name: Any) -> Department:
        dept_name = require_non_empty(name, "Department")
        department = self._departments.get_by_name(dept_name.upper())
        if not department:
            raise ValidationError(f"Department '{dept_name}' not found")
        return department

    def list_users(self) -> Sequence[User]:
        return self._users.list_active()

    def count_users(self) -> int:
        return self._users.count_active()

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def get_user_for(self, *, current_user_id: int, current_is_admin: bool, user_id: int) -> User:
        if not current_is_admin and int(current_user_id) != int(user_id):
            raise AuthorizationError("You can only view your own profile")
        return self.get_user(user_id)

    def create_user(
        self,
        *,
        username: str,
        password: str,
        first_name: str,
        last_name: str,
        role_name: str,
        department_name: str,
        birth_date: Any = None,
        registration_number: Optional[str] = None,
    ) -> User:
        username = require_non_empty(username, "Username")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        registration_number = optional_text(registration_number)

        if self._users.get_by_username(username, include_deleted=True):
            raise ConflictError("Username already exists")
        if registration_number and self._users.get_by_registration_number(registration_number, include_deleted=True):
            raise ConflictError("Registration number already exists")

        role = self._resolve_role(role_name)
        department = self._resolve_department(department_name)

        new_id = self._users.create(
            NewUser(
                first_name=first_name,
                last_name=last_name,
                username=username,
                password_hash=generate_password_hash(password),
                id_role=role.id_role,
                id_departement=department.id_departement,
                birth_date=parse_date_field(birth_date, "Birth date"),
                registration_number=registration_number,
            )
        )
        logger.info("User %s created (id=%s, role=%s)", username, new_id, role.name)
        return self.get_user(new_id)

    def update_user(self, user_id: int, payload: Mapping[str, Any]) -> User:
        user = self.get_user(user_id)
        changes: dict[str, Any] = {}

        for key in ("first_name", "last_name"):
            if key in payload:
                changes[key] = require_non_empty(payload[key], key.replace("_", " ").capitalize())

        if "username" in payload:
            username = require_non_empty(payload["username"], "Username")
            if username != user.username:
                other = self._users.get_by_username(username, include_deleted=True)
                if other and other.id_user != user.id_user:
                    raise ConflictError("Username already exists")
                changes["username"] = username

        if "registration_number" in payload:
            reg = optional_text(payload["registration_number"])
            if reg and reg != user.registration_number:
                other = self._users.get_by_registration_number(reg, include_deleted=True)
                if other and other.id_user != user.id_user:
                    raise ConflictError("Registration number already exists")
            changes["registration_number"] = reg

        if "birth_date" in payload:
            changes["birth_date"] = parse_date_field(payload["birth_date"], "Birth date")

        if payload.get("role_name"):
            changes["id_role"] = self._resolve_role(payload["role_name"]).id_role
        if payload.get("departement_name") or payload.get("department_name"):
            name = payload.get("departement_name") or payload.get("department_name")
            changes["id_departement"] = self._resolve_department(name).id_departement

        if payload.get("password"):
            require_min_length(payload["password"], "Password", MIN_PASSWORD_LENGTH)
            changes["password_hash"] = generate_password_hash(payload["password"])

        if changes:
            self._users.update(user.id_user, changes)
        return self.get_user(user.id_user)

    def delete_user(self, *, actor_id: Optional[int], user_id: int, now: Optional[datetime] = None) -> None:
        if actor_id is None:
            raise AuthorizationError("An authenticated actor is required")
        if int(actor_id) == int(user_id):
            raise ValidationError("You cannot delete your own account")

        user = self.get_user(user_id)
        if not self._users.soft_delete(user.id_user, deleted_by=int(actor_id), deleted_at=now or datetime.now()):
            raise NotFoundError("User not found")
        logger.info("User %s soft-deleted by %s", user.id_user, actor_id)

    def bulk_upsert(self, items: Sequence[Mapping[str, Any]]) -> list[BulkItemResult]:
        """Create or update users keyed by registration number.

        Each item is handled on its own; a failing item is reported and the
        rest of the batch continues.
        """
        if not isinstance(items, (list, tuple)) or not items:
            raise ValidationError("Request body must be a non-empty array of users")

        results: list[BulkItemResult] = []
        for item in items:
            reg = optional_text(item.get("registration_number")) if isinstance(item, Mapping) else None
            if not reg:
                results.append(BulkItemResult("N/A", "failed", reason="Missing registration number"))
                continue
            try:
                results.append(self._upsert_one(reg, item))
            except Exception as exc:
                if not isinstance(exc, (ValidationError, ConflictError)):
                    logger.exception("Bulk import failed for registration number %s", reg)
                results.append(BulkItemResult(reg, "failed", reason=str(exc)))
        return results

    def _upsert_one(self, reg: str, item: Mapping[str, Any]) -> BulkItemResult:
        department_name = item.get("departement_name") or item.get("department_name")
        existing = self._users.get_by_registration_number(reg)
        if existing:
            payload = {k: v for k, v in item.items() if k != "registration_number" and v not in (None, "")}
            if department_name:
                payload["departement_name"] = department_name
            updated = self.update_user(existing.id_user, payload)
            return BulkItemResult(reg, "updated", id_user=updated.id_user)

        created = self.create_user(
            username=item.get("username"),
            password=item.get("password"),
            first_name=item.get("first_name"),
            last_name=item.get("last_name"),
            role_name=item.get("role_name"),
            department_name=department_name,
            birth_date=item.get("birth_date"),
            registration_number=reg,
        )
        return BulkItemResult(reg, "created", id_user=created.id_user)

    def change_password(self, user_id: int, *, current_password: str, new_password: str) -> None:
        if not current_password or not new_password:
            raise ValidationError("Current and new password are required")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)

        user = self.get_user(user_id)
        if not verify_password(user.password_hash, current_password):
            raise ValidationError("Current password is incorrect")
        self._users.update(user.id_user, {"password_hash": generate_password_hash(new_password)})

    def set_profile_picture(self, user_id: int, file: Optional[UploadedFile]) -> User:
        if file is None or not (file.filename or "").strip():
            raise ValidationError("No profile picture uploaded")
        if self._storage is None:
            raise RuntimeError("File storage is not configured")

        user = self.get_user(user_id)
        url = self._storage.save(file, subdir="profile_pictures", prefix=f"user{user.id_user}")
        self._users.update(user.id_user, {"profile_picture_url": url})
        if user.profile_picture_url:
            self._storage.delete(user.profile_picture_url)
        return self.get_user(user.id_user)

    def remove_profile_picture(self, user_id: int) -> User:
        user = self.get_user(user_id)
        if not user.profile_picture_url:
            raise NotFoundError("No profile picture to remove")
        self._users.update(user.id_user, {"profile_picture_url": None})
        if self._storage is not None:
            self._storage.delete(user.profile_picture_url)
        return self.get_user(user.id_user)
