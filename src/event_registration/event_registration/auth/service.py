from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..core.enums import RoleName
from ..core.exceptions import AuthenticationError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from ..users.service import UserService, verify_password
from .tokens import TokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "userId": self.user.id_user,
            "roleId": self.user.id_role,
            "username": self.user.username,
            "profilePictureUrl": self.user.profile_picture_url,
        }


class AuthService:
    """Use case: self-registration, login and token-to-user resolution."""

    def __init__(self, users: UserRepository, user_service: UserService, tokens: TokenService):
        self._users = users
        self._user_service = user_service
        self._tokens = tokens

    def register(self, payload: Mapping[str, Any]) -> User:
        # Self-registration always yields an employee account.
        return self._user_service.create_user(
            username=payload.get("username"),
            password=payload.get("password"),
            first_name=payload.get("first_name"),
            last_name=payload.get("last_name"),
            role_name=RoleName.EMPLOYEE.value,
            department_name=payload.get("departement_name") or payload.get("department_name"),
            birth_date=payload.get("birth_date"),
            registration_number=payload.get("registration_number"),
        )

    def login(self, username: Optional[str], password: Optional[str]) -> LoginResult:
        if not username or not password:
            raise ValidationError("Username and password are required")

        user = self._users.get_by_username(username.strip())
        if not user or not verify_password(user.password_hash, password):
            logger.warning("Failed login for %s", username)
            raise AuthenticationError("Invalid username or password")

        return LoginResult(token=self._tokens.issue(user), user=user)

    def resolve_bearer(self, authorization: Optional[str]) -> User:
        if not authorization:
            raise AuthenticationError("No token provided")
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise AuthenticationError("Malformed authorization header")

        payload = self._tokens.verify(token.strip())
        user = self._users.get_by_id(payload.user_id)
        if not user:
            raise AuthenticationError("User not found")
        return user
