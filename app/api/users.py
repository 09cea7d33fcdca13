"""
User Endpoints

Listing and reading need a valid token; changes need MANAGE_USERS.
Deleting a user only deactivates it.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_permission
from app.database import get_db
from app.models import Permission
from app.schemas import UserCreate, UserMutationResponse, UserResponse, UserUpdate
from app.services.users import UserService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(get_current_user)],
)

can_manage = Depends(require_permission(Permission.MANAGE_USERS))


@router.get("", response_model=list[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)) -> list[UserResponse]:
    return [UserResponse.from_model(u) for u in await UserService(db).list()]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)) -> UserResponse:
    return UserResponse.from_model(await UserService(db).get(user_id))


@router.post(
    "",
    response_model=UserMutationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[can_manage],
)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> UserMutationResponse:
    user = await UserService(db).create(data)
    return UserMutationResponse(message="User created successfully", user=UserResponse.from_model(user))


@router.put("/{user_id}", response_model=UserMutationResponse, dependencies=[can_manage])
async def update_user(
    user_id: int,
    data: UserUpdate,
    db: AsyncSession = Depends(get_db),
) -> UserMutationResponse:
    user = await UserService(db).update(user_id, data)
    return UserMutationResponse(message="User updated successfully", user=UserResponse.from_model(user))


@router.delete("/{user_id}", response_model=UserMutationResponse, dependencies=[can_manage])
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
) -> UserMutationResponse:
    user = await UserService(db).delete(user_id)
    return UserMutationResponse(message="User deactivated successfully", user=UserResponse.from_model(user))
