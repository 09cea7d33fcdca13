"""
In-Memory Credential Store

Dictionary-backed store with the same contract as the SQLAlchemy one.
Used for local experiments and for exercising the credential service
without a database.
"""

import itertools
from dataclasses import replace
from typing import Iterable, Optional

from app.core.errors import DuplicateAccountError, NotFoundError
from app.services.auth.base import BaseCredentialStore, CredentialRecord, NewCredential


class InMemoryCredentialStore(BaseCredentialStore):
    """
    Attributes:
        role_ids: Roles accepted by create_credential (None accepts any)
    """

    def __init__(self, role_ids: Optional[Iterable[int]] = None):
        self._records: dict[str, CredentialRecord] = {}
        self._ids = itertools.count(1)
        self.role_ids = set(role_ids) if role_ids is not None else None

    async def find_by_identifier(self, identifier: str) -> Optional[CredentialRecord]:
        return self._records.get(identifier)

    async def create_credential(self, data: NewCredential) -> CredentialRecord:
        if data.identifier in self._records:
            raise DuplicateAccountError()
        if self.role_ids is not None and data.role_id not in self.role_ids:
            raise NotFoundError(f"Role #{data.role_id} not found")

        record = CredentialRecord(
            id=next(self._ids),
            identifier=data.identifier,
            password_hash=data.password_hash,
            role_id=data.role_id,
            is_active=data.is_active,
            name=data.name,
        )
        self._records[data.identifier] = record
        return record

    def deactivate(self, identifier: str) -> None:
        """Mark an account inactive, as the user service does."""
        self._records[identifier] = replace(self._records[identifier], is_active=False)

    def __len__(self) -> int:
        return len(self._records)
