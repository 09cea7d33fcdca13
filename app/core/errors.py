"""
Domain Error Taxonomy

Every failure the core raises is an AppError carrying a stable, machine
readable ``kind`` plus a human readable message. The HTTP boundary maps
``kind`` to a status code, so no code ever matches on message text.

Version: 1.0.0
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Stable identifiers surfaced to API clients in the ``error`` field."""
    VALIDATION = "validation_error"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    AUTH = "auth_error"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    UNEXPECTED = "unexpected"


ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.DUPLICATE: 400,
    ErrorKind.CONFLICT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.AUTH: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.UNEXPECTED: 500,
}


class AppError(Exception):
    """Base class for all errors raised by the service layer."""

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_CODES[self.kind]

    def to_dict(self) -> dict:
        """Convert to the JSON error payload returned to clients."""
        return {
            "success": False,
            "error": self.kind.value,
            "detail": self.message,
        }


class ValidationError(AppError):
    """Bad input shape or policy violation."""
    kind = ErrorKind.VALIDATION


class DuplicateError(AppError):
    """Uniqueness violation (table number, category name, email...)."""
    kind = ErrorKind.DUPLICATE


class NotFoundError(AppError):
    """Referenced entity does not exist."""
    kind = ErrorKind.NOT_FOUND


class AuthError(AppError):
    """Bad, missing or expired token or credentials."""
    kind = ErrorKind.AUTH


class AuthorizationError(AppError):
    """Authenticated user lacks the required permission."""
    kind = ErrorKind.FORBIDDEN


class ConflictError(AppError):
    """A state-transition guard vetoed the mutation."""
    kind = ErrorKind.CONFLICT


class UnexpectedError(AppError):
    """Persistence or infrastructure failure."""
    kind = ErrorKind.UNEXPECTED


# =============================================================================
# AUTHENTICATION ERRORS
# =============================================================================

class DuplicateAccountError(DuplicateError):
    def __init__(self, message: str = "User already exists"):
        super().__init__(message)


class InvalidPasswordError(ValidationError):
    """
    Password rejected by the password policy.

    Attributes:
        errors: Violated-rule messages, in policy order
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(f"Invalid password: {', '.join(self.errors)}")

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["errors"] = self.errors
        return payload


class InvalidCredentialsError(AuthError):
    """Unknown account and wrong password share this one message."""

    MESSAGE = "Invalid credentials"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.MESSAGE)


class AccountLockedError(AuthError):
    """Raised with the attempt tracker's lockout message verbatim."""
