class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 500


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    status_code = 400


class AuthenticationError(DomainError):
    """Raised when credentials or tokens are missing, invalid or expired."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    """Raised when a resource is absent or soft-deleted."""

    status_code = 404


class ConflictError(DomainError):
    """Raised on uniqueness conflicts (duplicate username, registration, ...)."""

    status_code = 409
