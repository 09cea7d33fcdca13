"""
Dining Table Endpoints

``/table-categories`` and ``/tables``. Changes need MANAGE_TABLES.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_permission
from app.database import get_db
from app.models import Permission
from app.schemas import (
    ErrorResponse,
    MessageResponse,
    TableCategoryCreate,
    TableCategoryResponse,
    TableCategoryUpdate,
    TableCreate,
    TableResponse,
    TableUpdate,
)
from app.services.tables import TableCategoryService, TableService

can_manage = Depends(require_permission(Permission.MANAGE_TABLES))

category_router = APIRouter(
    prefix="/table-categories",
    tags=["Table Categories"],
    dependencies=[Depends(get_current_user)],
)

router = APIRouter(
    prefix="/tables",
    tags=["Tables"],
    dependencies=[Depends(get_current_user)],
)


# =============================================================================
# TABLE CATEGORIES
# =============================================================================

@category_router.get("", response_model=list[TableCategoryResponse])
async def list_table_categories(db: AsyncSession = Depends(get_db)):
    return await TableCategoryService(db).list()


@category_router.get("/{category_id}", response_model=TableCategoryResponse)
async def get_table_category(category_id: int, db: AsyncSession = Depends(get_db)):
    return await TableCategoryService(db).get(category_id)


@category_router.post(
    "",
    response_model=TableCategoryResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[can_manage],
)
async def create_table_category(data: TableCategoryCreate, db: AsyncSession = Depends(get_db)):
    return await TableCategoryService(db).create(data)


@category_router.put("/{category_id}", response_model=TableCategoryResponse, dependencies=[can_manage])
async def update_table_category(
    category_id: int,
    data: TableCategoryUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await TableCategoryService(db).update(category_id, data)


@category_router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}},
    dependencies=[can_manage],
)
async def delete_table_category(category_id: int, db: AsyncSession = Depends(get_db)):
    await TableCategoryService(db).delete(category_id)
    return MessageResponse(message="Table category deleted successfully")


# =============================================================================
# TABLES
# =============================================================================

@router.get("", response_model=list[TableResponse])
async def list_tables(
    category_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await TableService(db).list(category_id=category_id)


@router.get("/{table_id}", response_model=TableResponse)
async def get_table(table_id: int, db: AsyncSession = Depends(get_db)):
    return await TableService(db).get(table_id)


@router.post(
    "",
    response_model=TableResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    dependencies=[can_manage],
)
async def create_table(data: TableCreate, db: AsyncSession = Depends(get_db)):
    return await TableService(db).create(data)


@router.put(
    "/{table_id}",
    response_model=TableResponse,
    responses={400: {"model": ErrorResponse}},
    dependencies=[can_manage],
)
async def update_table(table_id: int, data: TableUpdate, db: AsyncSession = Depends(get_db)):
    """A table with an open order keeps its status until the order ends."""
    return await TableService(db).update(table_id, data)


@router.delete(
    "/{table_id}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}},
    dependencies=[can_manage],
)
async def delete_table(table_id: int, db: AsyncSession = Depends(get_db)):
    """Occupied tables, tables pending payment and tables with open orders stay."""
    await TableService(db).delete(table_id)
    return MessageResponse(message="Table deleted successfully")
