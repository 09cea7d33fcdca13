"""
Resource Service Base Class

Shared plumbing for the services that sit between the routers and the
database: existence / count lookups used by the guards, and commits that
turn a uniqueness race into a DuplicateError instead of a 500.
"""

import logging

from sqlalchemy import Select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DuplicateError, UnexpectedError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


class BaseResourceService:
    """
    Attributes:
        db: The request's database session
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _exists(self, stmt: Select) -> bool:
        """True when ``stmt`` matches at least one row."""
        result = await self.db.execute(stmt.limit(1))
        return result.first() is not None

    async def _count(self, stmt: Select) -> int:
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def _commit(self, duplicate_message: str) -> None:
        """
        Commit the unit of work.

        The guards check uniqueness before writing, but two requests can
        still race; the database constraint is the last line. Any other
        integrity failure is an UnexpectedError.
        """
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            logger.warning(f"Integrity error on commit: {exc.orig}")
            if is_unique_violation(exc):
                raise DuplicateError(duplicate_message) from exc
            raise UnexpectedError("The change violates a database constraint") from exc


def is_unique_violation(exc: IntegrityError) -> bool:
    """PostgreSQL reports SQLSTATE 23505; SQLite only names it in the message."""
    if getattr(exc.orig, "sqlstate", None) == UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(exc.orig)
