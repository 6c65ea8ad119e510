from __future__ import annotations

from functools import wraps

from flask import current_app, g, request

from ..core.enums import RoleName
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..users.model import User

CONTAINER_KEY = "event_registration"


def get_container():
    return current_app.extensions[CONTAINER_KEY]


def current_user() -> User:
    user = getattr(g, "current_user", None)
    if user is None:
        raise AuthenticationError("Authentication required")
    return user


def login_required(view):
    """Resolve the Bearer token into `g.current_user` or fail with 401."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        auth_service = get_container().auth_service
        g.current_user = auth_service.resolve_bearer(request.headers.get("Authorization"))
        return view(*args, **kwargs)

    return wrapper


def roles_required(*role_names: str):
    """401 when unauthenticated, 403 when the user's role is not allowed."""
    allowed = {name.lower() for name in role_names}

    def decorator(view):
        @wraps(view)
        @login_required
        def wrapper(*args, **kwargs):
            role_name = (current_user().role_name or "").lower()
            if role_name not in allowed:
                raise AuthorizationError("Access denied: insufficient role")
            return view(*args, **kwargs)

        return wrapper

    return decorator


admin_required = roles_required(RoleName.ADMIN.value)
