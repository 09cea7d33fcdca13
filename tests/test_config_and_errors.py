"""
Settings derived values and the error hierarchy's HTTP mapping.
"""

import pytest

from app.core.config import DEFAULT_JWT_SECRET, EnvironmentMode, Settings
from app.core.errors import (
    AccountLockedError,
    AuthorizationError,
    ConflictError,
    DuplicateAccountError,
    ErrorKind,
    InvalidCredentialsError,
    InvalidPasswordError,
    NotFoundError,
    UnexpectedError,
)


def test_settings_derived_values():
    settings = Settings(jwt_expires_hours=2, login_block_minutes=15, cors_origins="a.com, b.com")

    assert settings.jwt_expires_seconds == 7200
    assert settings.login_block_seconds == 900
    assert settings.cors_origins_list == ["a.com", "b.com"]


def test_env_mode_is_case_insensitive():
    assert Settings(env_mode="PRODUCTION").env_mode == EnvironmentMode.PRODUCTION


def test_invalid_env_mode():
    with pytest.raises(ValueError):
        Settings(env_mode="qa")


def test_production_flags_default_secret():
    settings = Settings(env_mode="production", jwt_secret=DEFAULT_JWT_SECRET, cors_origins="*")

    assert settings.validate_production_config() == ["JWT_SECRET", "CORS_ORIGINS"]


def test_development_tolerates_defaults():
    settings = Settings(env_mode="development", jwt_secret=DEFAULT_JWT_SECRET)

    assert settings.validate_production_config() == []


@pytest.mark.parametrize(
    "error, kind, status",
    [
        (DuplicateAccountError(), ErrorKind.DUPLICATE, 400),
        (ConflictError("busy"), ErrorKind.CONFLICT, 400),
        (NotFoundError("missing"), ErrorKind.NOT_FOUND, 404),
        (InvalidCredentialsError(), ErrorKind.AUTH, 401),
        (AccountLockedError("blocked"), ErrorKind.AUTH, 401),
        (AuthorizationError("no"), ErrorKind.FORBIDDEN, 403),
        (UnexpectedError("boom"), ErrorKind.UNEXPECTED, 500),
    ],
)
def test_error_kinds_map_to_status(error, kind, status):
    assert error.kind == kind
    assert error.status_code == status


def test_invalid_password_payload_lists_errors():
    error = InvalidPasswordError(["too short", "no digit"])

    assert error.to_dict() == {
        "success": False,
        "error": "validation_error",
        "detail": "Invalid password: too short, no digit",
        "errors": ["too short", "no digit"],
    }
