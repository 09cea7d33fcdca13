"""
Role Endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_permission
from app.database import get_db
from app.models import Permission
from app.schemas import (
    MessageResponse,
    RoleCreate,
    RoleMutationResponse,
    RoleResponse,
    RoleUpdate,
)
from app.services.users import RoleService

router = APIRouter(
    prefix="/roles",
    tags=["Roles"],
    dependencies=[Depends(get_current_user)],
)

can_manage = Depends(require_permission(Permission.MANAGE_ROLES))


@router.get("", response_model=list[RoleResponse])
async def list_roles(db: AsyncSession = Depends(get_db)) -> list[RoleResponse]:
    return [RoleResponse.from_model(r) for r in await RoleService(db).list()]


# Declared before /{role_id} so "permissions" is not parsed as an id
@router.get("/permissions", response_model=list[str], summary="All grantable permissions")
async def list_permissions() -> list[str]:
    return RoleService.list_permissions()


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(role_id: int, db: AsyncSession = Depends(get_db)) -> RoleResponse:
    return RoleResponse.from_model(await RoleService(db).get(role_id))


@router.post(
    "",
    response_model=RoleMutationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[can_manage],
)
async def create_role(
    data: RoleCreate,
    db: AsyncSession = Depends(get_db),
) -> RoleMutationResponse:
    role = await RoleService(db).create(data)
    return RoleMutationResponse(message="Role created successfully", role=RoleResponse.from_model(role))


@router.put("/{role_id}", response_model=RoleMutationResponse, dependencies=[can_manage])
async def update_role(
    role_id: int,
    data: RoleUpdate,
    db: AsyncSession = Depends(get_db),
) -> RoleMutationResponse:
    role = await RoleService(db).update(role_id, data)
    return RoleMutationResponse(message="Role updated successfully", role=RoleResponse.from_model(role))


@router.delete("/{role_id}", response_model=MessageResponse, dependencies=[can_manage])
async def delete_role(role_id: int, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    await RoleService(db).delete(role_id)
    return MessageResponse(message="Role deleted successfully")
