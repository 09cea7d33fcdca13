"""
User and role services: soft deactivation, last-admin protection and
role permission management.
"""

import pytest

from app.core.errors import ConflictError, DuplicateError, InvalidPasswordError, NotFoundError
from app.models import Permission
from app.schemas import RoleCreate, RoleUpdate, UserCreate, UserUpdate
from app.services.auth import get_password_hasher
from app.services.users import RoleService, UserService


@pytest.fixture
def users(db) -> UserService:
    return UserService(db)


@pytest.fixture
def role_service(db) -> RoleService:
    return RoleService(db)


def new_user(role_id: int, email: str = "ana@restaurant.com", password: str = "Secure123!") -> UserCreate:
    return UserCreate(name="Ana", email=email, password=password, role_id=role_id)


async def test_create_user_hashes_password(users, roles):
    user = await users.create(new_user(roles["WAITER"].id))

    assert user.is_active
    assert user.role.name == "WAITER"
    assert get_password_hasher().verify("Secure123!", user.password_hash)


async def test_create_user_enforces_password_policy(users, roles):
    with pytest.raises(InvalidPasswordError):
        await users.create(new_user(roles["WAITER"].id, password="short"))
    assert await users.list() == []


async def test_create_user_duplicate_email(users, roles, waiter_user):
    with pytest.raises(DuplicateError):
        await users.create(new_user(roles["WAITER"].id, email=waiter_user.email))


async def test_create_user_unknown_role(users, roles):
    with pytest.raises(NotFoundError):
        await users.create(new_user(404))


async def test_update_user(users, roles, waiter_user):
    updated = await users.update(waiter_user.id, UserUpdate(name="Head Waiter", password="NewPass1!"))

    assert updated.name == "Head Waiter"
    assert get_password_hasher().verify("NewPass1!", updated.password_hash)


async def test_delete_deactivates(users, waiter_user, admin_user):
    user = await users.delete(waiter_user.id)

    assert user.is_active is False
    assert (await users.get(waiter_user.id)).is_active is False


async def test_last_admin_cannot_be_deactivated(users, admin_user):
    with pytest.raises(ConflictError):
        await users.delete(admin_user.id)
    with pytest.raises(ConflictError):
        await users.update(admin_user.id, UserUpdate(is_active=False))


async def test_last_admin_cannot_change_role(users, roles, admin_user):
    with pytest.raises(ConflictError):
        await users.update(admin_user.id, UserUpdate(role_id=roles["WAITER"].id))


async def test_admin_can_be_deactivated_when_another_remains(users, roles, admin_user):
    await users.create(new_user(roles["ADMIN"].id, email="second@restaurant.com"))

    user = await users.delete(admin_user.id)

    assert user.is_active is False


async def test_create_role_with_permissions(role_service):
    role = await role_service.create(RoleCreate(
        name="KITCHEN",
        permissions=[Permission.KITCHEN_ACCESS, Permission.KITCHEN_ACCESS],
    ))

    assert role.permission_names == ["KITCHEN_ACCESS"]


async def test_duplicate_role_name(role_service, roles):
    with pytest.raises(DuplicateError):
        await role_service.create(RoleCreate(name="ADMIN"))


async def test_replace_role_permissions(role_service, roles):
    role = await role_service.update(roles["WAITER"].id, RoleUpdate(
        permissions=[Permission.MANAGE_ORDERS, Permission.PROCESS_PAYMENTS],
    ))

    assert sorted(role.permission_names) == ["MANAGE_ORDERS", "PROCESS_PAYMENTS"]


async def test_role_with_users_cannot_be_deleted(role_service, roles, waiter_user):
    with pytest.raises(ConflictError):
        await role_service.delete(roles["WAITER"].id)


async def test_unused_role_is_deleted(role_service):
    role = await role_service.create(RoleCreate(name="HOST", permissions=[Permission.MANAGE_TABLES]))

    await role_service.delete(role.id)

    with pytest.raises(NotFoundError):
        await role_service.get(role.id)


def test_permission_catalog():
    assert "MANAGE_ORDERS" in RoleService.list_permissions()
    assert len(RoleService.list_permissions()) == len(Permission)
