from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from ..core.constants import DEFAULT_TOKEN_DAYS
from ..core.exceptions import AuthenticationError
from ..users.model import User

JWT_ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenPayload:
    user_id: int
    role_id: int
    username: str
    profile_picture_url: Optional[str] = None


class TokenService:
    """Issue and verify signed, time-limited access tokens."""

    def __init__(self, secret: str, *, expires_days: int = DEFAULT_TOKEN_DAYS):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._expires = timedelta(days=int(expires_days))

    def issue(self, user: User, *, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "userId": user.id_user,
            "roleId": user.id_role,
            "username": user.username,
            "profilePictureUrl": user.profile_picture_url,
            "iat": int(now.timestamp()),
            "exp": int((now + self._expires).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> TokenPayload:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError("Invalid token") from exc

        user_id = payload.get("userId")
        role_id = payload.get("roleId")
        if user_id is None or role_id is None:
            raise AuthenticationError("Invalid token payload")
        return TokenPayload(
            user_id=int(user_id),
            role_id=int(role_id),
            username=str(payload.get("username") or ""),
            profile_picture_url=payload.get("profilePictureUrl"),
        )
