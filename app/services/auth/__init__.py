"""
Authentication Service Factory

Single entry point for obtaining the credential service. The attempt
tracker, token codec and password hasher are process-wide singletons;
the credential store is bound to each request's database session.

Usage:
    from app.services.auth import get_credential_service

    service = get_credential_service(db)
    token = await service.login(email, password)
"""

import logging
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.services.auth.attempts import LoginAttemptTracker
from app.services.auth.base import (
    BaseCredentialStore,
    CredentialRecord,
    NewCredential,
    RegistrationInput,
    TokenClaims,
)
from app.services.auth.hashing import PasswordHasher
from app.services.auth.memory import InMemoryCredentialStore
from app.services.auth.password_policy import PasswordValidation, validate_password
from app.services.auth.service import CredentialService
from app.services.auth.store import SqlAlchemyCredentialStore
from app.services.auth.tokens import TokenCodec

logger = logging.getLogger(__name__)


@lru_cache()
def get_login_attempt_tracker() -> LoginAttemptTracker:
    """
    Get the process-wide login attempt tracker.

    Cached so every request shares the same failure counts.
    """
    settings = get_settings()
    logger.info(
        f"Login attempt tracker: {settings.max_login_attempts} attempts, "
        f"{settings.login_block_minutes} minute block"
    )
    return LoginAttemptTracker(
        max_attempts=settings.max_login_attempts,
        block_time=settings.login_block_seconds,
    )


@lru_cache()
def get_token_codec() -> TokenCodec:
    settings = get_settings()
    return TokenCodec(settings.jwt_secret, algorithm=settings.jwt_algorithm)


@lru_cache()
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().bcrypt_rounds)


def get_credential_service(db: AsyncSession) -> CredentialService:
    """
    Build a credential service for one request.

    Args:
        db: The request's database session

    Returns:
        CredentialService backed by the SQLAlchemy store
    """
    return CredentialService(
        store=SqlAlchemyCredentialStore(db),
        tracker=get_login_attempt_tracker(),
        token_codec=get_token_codec(),
        hasher=get_password_hasher(),
        token_lifetime=get_settings().jwt_expires_seconds,
    )


def reset_auth_services() -> None:
    """
    Clear the cached singletons.

    The next call rebuilds them from the current settings, with an
    empty attempt tracker.
    """
    get_login_attempt_tracker.cache_clear()
    get_token_codec.cache_clear()
    get_password_hasher.cache_clear()
    logger.debug("Auth service caches cleared")


__all__ = [
    "get_credential_service",
    "get_login_attempt_tracker",
    "get_token_codec",
    "get_password_hasher",
    "reset_auth_services",
    "BaseCredentialStore",
    "CredentialRecord",
    "CredentialService",
    "InMemoryCredentialStore",
    "LoginAttemptTracker",
    "NewCredential",
    "PasswordHasher",
    "PasswordValidation",
    "RegistrationInput",
    "SqlAlchemyCredentialStore",
    "TokenClaims",
    "TokenCodec",
    "validate_password",
]
