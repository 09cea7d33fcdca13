"""
Credential Service

Registration and login: password policy, bcrypt hashing, failed-login
tracking and token issuance.

"No such account" and "wrong password" fail with the exact same error and
the same bcrypt cost, so neither the response nor its timing
reveals whether an email is registered.
"""

import asyncio
import logging
from typing import NoReturn

from app.core.errors import (
    AccountLockedError,
    AuthError,
    DuplicateAccountError,
    InvalidCredentialsError,
    InvalidPasswordError,
)
from app.services.auth.attempts import LoginAttemptTracker
from app.services.auth.base import (
    BaseCredentialStore,
    CredentialRecord,
    NewCredential,
    RegistrationInput,
    TokenClaims,
)
from app.services.auth.hashing import PasswordHasher
from app.services.auth.password_policy import validate_password
from app.services.auth.tokens import TokenCodec

logger = logging.getLogger(__name__)

TOKEN_LIFETIME_SECONDS = 24 * 60 * 60


class CredentialService:
    """
    Orchestrates account lookup, password checks, attempt tracking and
    token issuance.

    Attributes:
        store: Credential store for lookups and account creation
        tracker: Failed-login tracker shared across requests
        token_codec: Signs access tokens
        hasher: bcrypt password hasher
        token_lifetime: Token validity in seconds

    Example:
        >>> service = CredentialService(store, tracker, codec, PasswordHasher())
        >>> token = await service.login("a@x.com", "Strong1!")
    """

    def __init__(
        self,
        store: BaseCredentialStore,
        tracker: LoginAttemptTracker,
        token_codec: TokenCodec,
        hasher: PasswordHasher,
        token_lifetime: int = TOKEN_LIFETIME_SECONDS,
    ):
        self.store = store
        self.tracker = tracker
        self.token_codec = token_codec
        self.hasher = hasher
        self.token_lifetime = token_lifetime

    async def register(self, candidate: RegistrationInput) -> str:
        """
        Create an account and return its access token.

        Raises:
            DuplicateAccountError: If the email is already registered
            InvalidPasswordError: If the password policy rejects the password
        """
        existing = await self.store.find_by_identifier(candidate.email)
        if existing is not None:
            raise DuplicateAccountError()

        validation = validate_password(candidate.password)
        if not validation.is_valid:
            raise InvalidPasswordError(validation.errors)

        # bcrypt is CPU bound; keep it off the event loop
        password_hash = await asyncio.to_thread(self.hasher.hash, candidate.password)
        record = await self.store.create_credential(
            NewCredential(
                identifier=candidate.email,
                password_hash=password_hash,
                name=candidate.name,
                role_id=candidate.role_id,
                is_active=True,
            )
        )

        logger.info(f"Registered {record.identifier} (user #{record.id})")
        return self._issue_token(record)

    async def login(self, identifier: str, password: str) -> str:
        """
        Authenticate and return an access token.

        Raises:
            AccountLockedError: While the identifier is blocked
            InvalidCredentialsError: Unknown account, inactive account or wrong password
        """
        check = self.tracker.check_login_attempts(identifier)
        if not check.can_login:
            logger.warning(f"Login refused for blocked account {identifier}")
            raise AccountLockedError(check.message)

        record = await self.store.find_by_identifier(identifier)
        if record is None or not record.is_active:
            await asyncio.to_thread(self.hasher.verify_dummy, password)
            self._fail(identifier)

        matches = await asyncio.to_thread(self.hasher.verify, password, record.password_hash)
        if not matches:
            self._fail(identifier)

        self.tracker.reset_login_attempts(identifier)
        logger.info(f"Login succeeded for {identifier}")
        return self._issue_token(record)

    def decode_token(self, token: str) -> TokenClaims:
        """
        Verify a token issued by this service.

        Raises:
            AuthError: If the token is expired, invalid or malformed
        """
        claims = self.token_codec.decode(token)
        try:
            return TokenClaims(
                user_id=int(claims["id"]),
                email=str(claims["email"]),
                role_id=int(claims["role_id"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise AuthError("Invalid token") from exc

    def _fail(self, identifier: str) -> NoReturn:
        self.tracker.record_failed_attempt(identifier)
        logger.info(
            f"Failed login for {identifier} "
            f"({self.tracker.remaining_attempts(identifier)} attempts left)"
        )
        raise InvalidCredentialsError()

    def _issue_token(self, record: CredentialRecord) -> str:
        payload = {
            "sub": str(record.id),
            "id": record.id,
            "email": record.identifier,
            "role_id": record.role_id,
        }
        return self.token_codec.sign(payload, expires_in=self.token_lifetime)
