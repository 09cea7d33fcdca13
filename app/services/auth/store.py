"""
SQLAlchemy Credential Store

Reads and creates staff accounts in the ``users`` table.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DuplicateAccountError, NotFoundError
from app.models import Role, User
from app.services.auth.base import BaseCredentialStore, CredentialRecord, NewCredential

logger = logging.getLogger(__name__)


def _to_record(user: User) -> CredentialRecord:
    return CredentialRecord(
        id=user.id,
        identifier=user.email,
        password_hash=user.password_hash,
        role_id=user.role_id,
        is_active=user.is_active,
        name=user.name,
    )


class SqlAlchemyCredentialStore(BaseCredentialStore):
    """Credential store bound to one request's database session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_identifier(self, identifier: str) -> Optional[CredentialRecord]:
        result = await self.db.execute(select(User).where(User.email == identifier))
        user = result.scalar_one_or_none()
        return _to_record(user) if user else None

    async def create_credential(self, data: NewCredential) -> CredentialRecord:
        role = await self.db.get(Role, data.role_id)
        if role is None:
            raise NotFoundError(f"Role #{data.role_id} not found")

        user = User(
            name=data.name,
            email=data.identifier,
            password_hash=data.password_hash,
            role_id=data.role_id,
            is_active=data.is_active,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            # Lost a race against a concurrent registration
            await self.db.rollback()
            raise DuplicateAccountError() from exc

        logger.info(f"User #{user.id} created ({user.email})")
        return _to_record(user)
