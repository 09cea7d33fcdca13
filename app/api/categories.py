"""
Product Category Endpoints
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_permission
from app.database import get_db
from app.models import Category, Permission
from app.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    DeletionResponse,
)
from app.services.menu import DELETION_MESSAGES, CategoryService

router = APIRouter(
    prefix="/categories",
    tags=["Categories"],
    dependencies=[Depends(get_current_user)],
)

can_manage = Depends(require_permission(Permission.MANAGE_CATEGORIES))


def _to_response(category: Category, product_count: int) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        name=category.name,
        description=category.description,
        status=category.status,
        product_count=product_count,
    )


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    include_inactive: bool = Query(True),
    db: AsyncSession = Depends(get_db),
) -> list[CategoryResponse]:
    rows = await CategoryService(db).list(include_inactive=include_inactive)
    return [_to_response(category, count) for category, count in rows]


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: int, db: AsyncSession = Depends(get_db)) -> CategoryResponse:
    service = CategoryService(db)
    category = await service.get(category_id)
    return _to_response(category, await service.product_count(category_id))


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[can_manage],
)
async def create_category(data: CategoryCreate, db: AsyncSession = Depends(get_db)) -> CategoryResponse:
    category = await CategoryService(db).create(data)
    return _to_response(category, 0)


@router.put("/{category_id}", response_model=CategoryResponse, dependencies=[can_manage])
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
) -> CategoryResponse:
    service = CategoryService(db)
    category = await service.update(category_id, data)
    return _to_response(category, await service.product_count(category_id))


@router.delete("/{category_id}", response_model=DeletionResponse, dependencies=[can_manage])
async def delete_category(category_id: int, db: AsyncSession = Depends(get_db)) -> DeletionResponse:
    """Categories that still have products are marked INACTIVE instead."""
    outcome = await CategoryService(db).delete(category_id)
    return DeletionResponse(message=DELETION_MESSAGES["category"][outcome], outcome=outcome.value)
