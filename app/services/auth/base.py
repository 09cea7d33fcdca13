"""
Credential Store Abstract Base Class

Defines the contract the credential service uses to read and create
accounts. The SQLAlchemy store backs the running API; the in-memory
store backs local experiments and unit tests.

Design Pattern: Strategy Pattern
    - The service never imports the ORM directly
    - Stores can be swapped without touching authentication logic
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CredentialRecord:
    """
    What the credential service needs to know about an account.

    Attributes:
        id: Primary key of the account
        identifier: Login email (unique, case-sensitive)
        password_hash: bcrypt hash of the password
        role_id: Role assigned to the account
        is_active: False once the account has been deactivated
        name: Display name
    """
    id: int
    identifier: str
    password_hash: str
    role_id: int
    is_active: bool = True
    name: str = ""


@dataclass(frozen=True)
class NewCredential:
    """Data handed to the store when an account is created."""
    identifier: str
    password_hash: str
    name: str
    role_id: int
    is_active: bool = True


@dataclass(frozen=True)
class RegistrationInput:
    """Registration request as received from the boundary."""
    email: str
    password: str
    name: str
    role_id: int


@dataclass(frozen=True)
class TokenClaims:
    """Decoded access token."""
    user_id: int
    email: str
    role_id: int


class BaseCredentialStore(ABC):
    """Abstract base class for credential stores."""

    @abstractmethod
    async def find_by_identifier(self, identifier: str) -> Optional[CredentialRecord]:
        """
        Look up an account by its login identifier.

        Returns:
            The record, or None when no account uses the identifier
        """
        pass

    @abstractmethod
    async def create_credential(self, data: NewCredential) -> CredentialRecord:
        """
        Persist a new account.

        Raises:
            DuplicateAccountError: If the identifier is already taken
            NotFoundError: If the role does not exist
        """
        pass
