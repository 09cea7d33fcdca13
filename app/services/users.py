"""
User & Role Services

Staff accounts and the roles that grant their permissions. Users are
never hard-deleted: deleting one deactivates it, and the last active
administrator cannot be deactivated. Roles cannot be removed while any
user holds them.
"""

import asyncio
import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from app.core.config import get_settings
from app.core.errors import InvalidPasswordError, NotFoundError
from app.models import Permission, Role, RolePermission, User
from app.schemas import RoleCreate, RoleUpdate, UserCreate, UserUpdate
from app.services import guards
from app.services.auth import get_password_hasher, validate_password
from app.services.base import BaseResourceService

logger = logging.getLogger(__name__)

DUPLICATE_USER = "A user with that email already exists"
DUPLICATE_ROLE = "A role with that name already exists"


class UserService(BaseResourceService):

    def _query(self):
        return select(User).options(
            selectinload(User.role).selectinload(Role.permissions)
        )

    async def list(self) -> List[User]:
        result = await self.db.execute(self._query().order_by(User.id))
        return list(result.scalars().all())

    async def get(self, user_id: int) -> User:
        result = await self.db.execute(
            self._query()
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def create(self, data: UserCreate) -> User:
        guards.ensure_unique(await self._email_taken(data.email), DUPLICATE_USER)
        await self._ensure_role(data.role_id)

        user = User(
            name=data.name,
            email=data.email,
            password_hash=await self._hash(data.password),
            role_id=data.role_id,
            is_active=True,
        )
        self.db.add(user)
        await self._commit(DUPLICATE_USER)

        logger.info(f"User #{user.id} created ({user.email})")
        return await self.get(user.id)

    async def update(self, user_id: int, data: UserUpdate) -> User:
        user = await self.get(user_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in changes and changes["email"] != user.email:
            guards.ensure_unique(
                await self._email_taken(changes["email"], exclude_id=user_id),
                DUPLICATE_USER,
            )
        if "role_id" in changes and changes["role_id"] != user.role_id:
            await self._ensure_role(changes["role_id"])
            # Moving the last admin to another role removes the last admin too
            await self._ensure_not_last_admin(user)
        if changes.get("is_active") is False:
            await self._ensure_not_last_admin(user)

        password = changes.pop("password", None)
        if password is not None:
            user.password_hash = await self._hash(password)

        for field, value in changes.items():
            setattr(user, field, value)

        await self._commit(DUPLICATE_USER)
        return await self.get(user_id)

    async def delete(self, user_id: int) -> User:
        """Deactivate a user. The account and its history are kept."""
        user = await self.get(user_id)
        await self._ensure_not_last_admin(user)

        user.is_active = False
        await self.db.commit()
        logger.info(f"User #{user_id} deactivated")
        return await self.get(user_id)

    async def _ensure_not_last_admin(self, user: User) -> None:
        admin_role = get_settings().admin_role_name
        is_active_admin = user.is_active and user.role.name == admin_role
        if not is_active_admin:
            return
        active_admins = await self._count(
            select(func.count(User.id))
            .join(Role, User.role_id == Role.id)
            .where(Role.name == admin_role, User.is_active.is_(True))
        )
        guards.ensure_admin_remains(is_active_admin, active_admins)

    async def _hash(self, password: str) -> str:
        result = validate_password(password)
        if not result.is_valid:
            raise InvalidPasswordError(result.errors)
        return await asyncio.to_thread(get_password_hasher().hash, password)

    async def _email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(User.id).where(User.email == email)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return await self._exists(stmt)

    async def _ensure_role(self, role_id: int) -> None:
        if await self.db.get(Role, role_id) is None:
            raise NotFoundError("Role not found")


class RoleService(BaseResourceService):

    def _query(self):
        return select(Role).options(selectinload(Role.permissions))

    async def list(self) -> List[Role]:
        result = await self.db.execute(self._query().order_by(Role.name))
        return list(result.scalars().all())

    async def get(self, role_id: int) -> Role:
        result = await self.db.execute(
            self._query()
            .where(Role.id == role_id)
            .execution_options(populate_existing=True)
        )
        role = result.scalar_one_or_none()
        if role is None:
            raise NotFoundError("Role not found")
        return role

    @staticmethod
    def list_permissions() -> List[str]:
        return [p.value for p in Permission]

    async def create(self, data: RoleCreate) -> Role:
        guards.ensure_unique(await self._name_taken(data.name), DUPLICATE_ROLE)

        role = Role(
            name=data.name,
            description=data.description,
            permissions=[RolePermission(permission=p) for p in _unique(data.permissions)],
        )
        self.db.add(role)
        await self._commit(DUPLICATE_ROLE)

        logger.info(f"Role #{role.id} created ({role.name})")
        return await self.get(role.id)

    async def update(self, role_id: int, data: RoleUpdate) -> Role:
        role = await self.get(role_id)

        if data.name and data.name != role.name:
            guards.ensure_unique(
                await self._name_taken(data.name, exclude_id=role_id),
                DUPLICATE_ROLE,
            )
            role.name = data.name
        if data.description is not None:
            role.description = data.description

        if data.permissions is not None:
            role.permissions.clear()
            # Old rows must be gone before re-inserting the same permission
            await self.db.flush()
            role.permissions.extend(
                RolePermission(permission=p) for p in _unique(data.permissions)
            )

        await self._commit(DUPLICATE_ROLE)
        return await self.get(role_id)

    async def delete(self, role_id: int) -> None:
        role = await self.get(role_id)
        user_count = await self._count(
            select(func.count(User.id)).where(User.role_id == role_id)
        )
        guards.ensure_role_deletable(user_count)

        await self.db.delete(role)
        await self.db.commit()
        logger.info(f"Role #{role_id} deleted")

    async def _name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Role.id).where(Role.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Role.id != exclude_id)
        return await self._exists(stmt)


def _unique(permissions: List[Permission]) -> List[Permission]:
    return list(dict.fromkeys(permissions))
