"""
Dining Table Services

CRUD for dining tables and table categories with their guards:
unique table numbers and category names, no status change while a table
has an open order, and no deletion of busy tables or of categories that
still have tables.
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from app.core.errors import NotFoundError
from app.models import DiningTable, Order, OrderStatus, TableCategory
from app.schemas import (
    TableCategoryCreate,
    TableCategoryUpdate,
    TableCreate,
    TableUpdate,
)
from app.services import guards
from app.services.base import BaseResourceService

logger = logging.getLogger(__name__)

DUPLICATE_TABLE = "A table with that number already exists"
DUPLICATE_TABLE_CATEGORY = "A table category with that name already exists"


class TableCategoryService(BaseResourceService):

    async def list(self) -> List[TableCategory]:
        result = await self.db.execute(select(TableCategory).order_by(TableCategory.name))
        return list(result.scalars().all())

    async def get(self, category_id: int) -> TableCategory:
        result = await self.db.execute(
            select(TableCategory)
            .where(TableCategory.id == category_id)
            .execution_options(populate_existing=True)
        )
        category = result.scalar_one_or_none()
        if category is None:
            raise NotFoundError("Table category not found")
        return category

    async def create(self, data: TableCategoryCreate) -> TableCategory:
        guards.ensure_unique(await self._name_taken(data.name), DUPLICATE_TABLE_CATEGORY)

        category = TableCategory(
            name=data.name,
            description=data.description,
            status=data.status,
        )
        self.db.add(category)
        await self._commit(DUPLICATE_TABLE_CATEGORY)

        logger.info(f"Table category #{category.id} created ({category.name})")
        return await self.get(category.id)

    async def update(self, category_id: int, data: TableCategoryUpdate) -> TableCategory:
        category = await self.get(category_id)

        if data.name and data.name != category.name:
            guards.ensure_unique(
                await self._name_taken(data.name, exclude_id=category_id),
                DUPLICATE_TABLE_CATEGORY,
            )

        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(category, field, value)
        await self._commit(DUPLICATE_TABLE_CATEGORY)
        return await self.get(category_id)

    async def delete(self, category_id: int) -> None:
        category = await self.get(category_id)
        table_count = await self._count(
            select(func.count(DiningTable.id)).where(DiningTable.category_id == category_id)
        )
        guards.ensure_table_category_deletable(table_count)

        await self.db.delete(category)
        await self.db.commit()
        logger.info(f"Table category #{category_id} deleted")

    async def _name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(TableCategory.id).where(TableCategory.name == name)
        if exclude_id is not None:
            stmt = stmt.where(TableCategory.id != exclude_id)
        return await self._exists(stmt)


class TableService(BaseResourceService):

    def _query(self):
        return select(DiningTable).options(selectinload(DiningTable.category))

    async def list(self, category_id: Optional[int] = None) -> List[DiningTable]:
        stmt = self._query().order_by(DiningTable.number, DiningTable.description)
        if category_id is not None:
            stmt = stmt.where(DiningTable.category_id == category_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get(self, table_id: int) -> DiningTable:
        result = await self.db.execute(
            self._query()
            .where(DiningTable.id == table_id)
            .execution_options(populate_existing=True)
        )
        table = result.scalar_one_or_none()
        if table is None:
            raise NotFoundError("Table not found")
        return table

    async def create(self, data: TableCreate) -> DiningTable:
        guards.ensure_unique(await self._number_taken(data.number), DUPLICATE_TABLE)
        if data.category_id is not None:
            await self._ensure_category(data.category_id)

        table = DiningTable(
            number=data.number,
            description=data.description,
            capacity=data.capacity,
            status=data.status,
            category_id=data.category_id,
        )
        self.db.add(table)
        await self._commit(DUPLICATE_TABLE)

        logger.info(f"Table #{table.id} created (number {table.number})")
        return await self.get(table.id)

    async def update(self, table_id: int, data: TableUpdate) -> DiningTable:
        table = await self.get(table_id)

        if data.number and data.number != table.number:
            guards.ensure_unique(
                await self._number_taken(data.number, exclude_id=table_id),
                DUPLICATE_TABLE,
            )

        if data.status is not None and data.status != table.status:
            guards.ensure_table_status_change_allowed(
                table.status, data.status, await self.has_open_order(table_id)
            )

        changes = data.model_dump(exclude_unset=True)
        if changes.get("category_id") is not None:
            await self._ensure_category(changes["category_id"])

        for field, value in changes.items():
            # category_id may be cleared explicitly; other fields ignore nulls
            if value is None and field != "category_id":
                continue
            setattr(table, field, value)

        await self._commit(DUPLICATE_TABLE)
        return await self.get(table_id)

    async def delete(self, table_id: int) -> None:
        table = await self.get(table_id)
        guards.ensure_table_deletable(table.status, await self.has_open_order(table_id))

        await self.db.delete(table)
        await self.db.commit()
        logger.info(f"Table #{table_id} deleted")

    async def has_open_order(self, table_id: int, exclude_order_id: Optional[int] = None) -> bool:
        stmt = select(Order.id).where(
            Order.table_id == table_id,
            Order.status == OrderStatus.OPEN,
        )
        if exclude_order_id is not None:
            stmt = stmt.where(Order.id != exclude_order_id)
        return await self._exists(stmt)

    async def _number_taken(self, number: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(DiningTable.id).where(DiningTable.number == number)
        if exclude_id is not None:
            stmt = stmt.where(DiningTable.id != exclude_id)
        return await self._exists(stmt)

    async def _ensure_category(self, category_id: int) -> None:
        if await self.db.get(TableCategory, category_id) is None:
            raise NotFoundError("Table category not found")
