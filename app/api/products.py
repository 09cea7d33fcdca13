"""
Product Endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_permission
from app.database import get_db
from app.models import Permission, ProductStatus
from app.schemas import (
    DeletionResponse,
    ErrorResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from app.services.menu import DELETION_MESSAGES, ProductService

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    dependencies=[Depends(get_current_user)],
)

can_manage = Depends(require_permission(Permission.MANAGE_PRODUCTS))


@router.get("", response_model=list[ProductResponse])
async def list_products(
    category_id: Optional[int] = Query(None),
    status: Optional[ProductStatus] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
):
    """Filter by category, status or a case-insensitive name fragment."""
    return await ProductService(db).list(category_id=category_id, status=status, search=search)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    return await ProductService(db).get(product_id)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    dependencies=[can_manage],
)
async def create_product(data: ProductCreate, db: AsyncSession = Depends(get_db)):
    return await ProductService(db).create(data)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    dependencies=[can_manage],
)
async def update_product(product_id: int, data: ProductUpdate, db: AsyncSession = Depends(get_db)):
    return await ProductService(db).update(product_id, data)


@router.delete("/{product_id}", response_model=DeletionResponse, dependencies=[can_manage])
async def delete_product(product_id: int, db: AsyncSession = Depends(get_db)) -> DeletionResponse:
    """Products that appear on any order are marked INACTIVE instead."""
    outcome = await ProductService(db).delete(product_id)
    return DeletionResponse(message=DELETION_MESSAGES["product"][outcome], outcome=outcome.value)
