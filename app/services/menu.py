"""
Menu Services

Product categories and products. Both degrade a delete into a soft
deactivation when the record is still referenced: a category with
products, or a product that appears on any order item (open or
historical).
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from app.core.errors import NotFoundError
from app.models import (
    Category,
    CategoryStatus,
    OrderItem,
    Product,
    ProductStatus,
)
from app.schemas import CategoryCreate, CategoryUpdate, ProductCreate, ProductUpdate
from app.services import guards
from app.services.base import BaseResourceService
from app.services.guards import DeletionOutcome

logger = logging.getLogger(__name__)

DUPLICATE_CATEGORY = "A category with that name already exists"
DUPLICATE_PRODUCT = "A product with that name already exists in this category"

DELETION_MESSAGES = {
    "category": {
        DeletionOutcome.DELETED: "Category deleted successfully",
        DeletionOutcome.DEACTIVATED: "Category marked as inactive because it has associated products",
    },
    "product": {
        DeletionOutcome.DELETED: "Product deleted successfully",
        DeletionOutcome.DEACTIVATED: "Product marked as inactive because it has associated orders",
    },
}


class CategoryService(BaseResourceService):

    async def list(self, include_inactive: bool = True) -> List[tuple[Category, int]]:
        """Categories with their product count, by name."""
        stmt = (
            select(Category, func.count(Product.id))
            .outerjoin(Product, Product.category_id == Category.id)
            .group_by(Category.id)
            .order_by(Category.name)
        )
        if not include_inactive:
            stmt = stmt.where(Category.status == CategoryStatus.ACTIVE)
        result = await self.db.execute(stmt)
        return [(category, count) for category, count in result.all()]

    async def get(self, category_id: int) -> Category:
        result = await self.db.execute(
            select(Category)
            .where(Category.id == category_id)
            .execution_options(populate_existing=True)
        )
        category = result.scalar_one_or_none()
        if category is None:
            raise NotFoundError("Category not found")
        return category

    async def product_count(self, category_id: int) -> int:
        return await self._count(
            select(func.count(Product.id)).where(Product.category_id == category_id)
        )

    async def create(self, data: CategoryCreate) -> Category:
        guards.ensure_unique(await self._name_taken(data.name), DUPLICATE_CATEGORY)

        category = Category(
            name=data.name,
            description=data.description,
            status=CategoryStatus.ACTIVE,
        )
        self.db.add(category)
        await self._commit(DUPLICATE_CATEGORY)

        logger.info(f"Category #{category.id} created ({category.name})")
        return await self.get(category.id)

    async def update(self, category_id: int, data: CategoryUpdate) -> Category:
        category = await self.get(category_id)

        if data.name and data.name != category.name:
            guards.ensure_unique(
                await self._name_taken(data.name, exclude_id=category_id),
                DUPLICATE_CATEGORY,
            )

        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(category, field, value)
        await self._commit(DUPLICATE_CATEGORY)
        return await self.get(category_id)

    async def delete(self, category_id: int) -> DeletionOutcome:
        category = await self.get(category_id)
        outcome = guards.category_deletion_outcome(await self.product_count(category_id))

        if outcome == DeletionOutcome.DEACTIVATED:
            category.status = CategoryStatus.INACTIVE
            logger.info(f"Category #{category_id} has products, marked INACTIVE")
        else:
            await self.db.delete(category)
            logger.info(f"Category #{category_id} deleted")

        await self.db.commit()
        return outcome

    async def _name_taken(self, name: str, exclude_id: Optional[int] = None) -> bool:
        stmt = select(Category.id).where(Category.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        return await self._exists(stmt)


class ProductService(BaseResourceService):

    def _query(self):
        return select(Product).options(selectinload(Product.category))

    async def list(
        self,
        category_id: Optional[int] = None,
        status: Optional[ProductStatus] = None,
        search: Optional[str] = None,
    ) -> List[Product]:
        stmt = self._query().order_by(Product.name)
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)
        if status is not None:
            stmt = stmt.where(Product.status == status)
        if search:
            stmt = stmt.where(Product.name.ilike(f"%{search}%"))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get(self, product_id: int) -> Product:
        result = await self.db.execute(
            self._query()
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )
        product = result.scalar_one_or_none()
        if product is None:
            raise NotFoundError("Product not found")
        return product

    async def create(self, data: ProductCreate) -> Product:
        guards.ensure_positive_price(data.price)
        await self._ensure_category(data.category_id)
        guards.ensure_unique(
            await self._name_taken(data.name, data.category_id),
            DUPLICATE_PRODUCT,
        )

        product = Product(
            name=data.name,
            description=data.description,
            price=data.price,
            stock=data.stock,
            image_url=data.image_url,
            category_id=data.category_id,
            status=guards.initial_product_status(data.stock),
        )
        self.db.add(product)
        await self._commit(DUPLICATE_PRODUCT)

        logger.info(f"Product #{product.id} created ({product.name})")
        return await self.get(product.id)

    async def update(self, product_id: int, data: ProductUpdate) -> Product:
        product = await self.get(product_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        guards.ensure_positive_price(changes.get("price"))

        name = changes.get("name", product.name)
        category_id = changes.get("category_id", product.category_id)
        if "category_id" in changes and category_id != product.category_id:
            await self._ensure_category(category_id)
        if name != product.name or category_id != product.category_id:
            guards.ensure_unique(
                await self._name_taken(name, category_id, exclude_id=product_id),
                DUPLICATE_PRODUCT,
            )

        requested = changes.pop("status", None)
        if requested is not None and requested != product.status:
            guards.ensure_product_status_change_allowed(
                product.status, requested, await self.has_order_items(product_id)
            )

        for field, value in changes.items():
            setattr(product, field, value)
        product.status = guards.resolve_product_status(
            product.status, requested, changes.get("stock")
        )

        await self._commit(DUPLICATE_PRODUCT)
        return await self.get(product_id)

    async def delete(self, product_id: int) -> DeletionOutcome:
        product = await self.get(product_id)
        outcome = guards.product_deletion_outcome(await self.has_order_items(product_id))

        if outcome == DeletionOutcome.DEACTIVATED:
            product.status = ProductStatus.INACTIVE
            logger.info(f"Product #{product_id} is referenced by orders, marked INACTIVE")
        else:
            await self.db.delete(product)
            logger.info(f"Product #{product_id} deleted")

        await self.db.commit()
        return outcome

    async def has_order_items(self, product_id: int) -> bool:
        return await self._exists(
            select(OrderItem.id).where(OrderItem.product_id == product_id)
        )

    async def _name_taken(
        self,
        name: str,
        category_id: int,
        exclude_id: Optional[int] = None,
    ) -> bool:
        stmt = select(Product.id).where(
            Product.name == name,
            Product.category_id == category_id,
        )
        if exclude_id is not None:
            stmt = stmt.where(Product.id != exclude_id)
        return await self._exists(stmt)

    async def _ensure_category(self, category_id: int) -> None:
        if await self.db.get(Category, category_id) is None:
            raise NotFoundError("Category not found")
