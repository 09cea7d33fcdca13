"""
Category and product services: uniqueness, stock status and soft deletes.
"""

import pytest

from app.core.errors import (
    ConflictError,
    DuplicateError,
    NotFoundError,
    UnexpectedError,
    ValidationError,
)
from app.models import (
    Category,
    CategoryStatus,
    DiningTable,
    Order,
    OrderItem,
    OrderStatus,
    ProductStatus,
)
from app.schemas import CategoryCreate, CategoryUpdate, ProductCreate, ProductUpdate
from app.services.base import BaseResourceService
from app.services.guards import DeletionOutcome
from app.services.menu import CategoryService, ProductService


@pytest.fixture
def categories(db) -> CategoryService:
    return CategoryService(db)


@pytest.fixture
def products(db) -> ProductService:
    return ProductService(db)


@pytest.fixture
async def desserts(categories):
    return await categories.create(CategoryCreate(name="Desserts"))


async def reference_in_order(db, product_id: int) -> None:
    table = DiningTable(number="99", capacity=2)
    db.add(table)
    await db.flush()
    db.add(Order(
        table_id=table.id,
        status=OrderStatus.CLOSED,
        items=[OrderItem(product_id=product_id, quantity=1, unit_price=5.0)],
    ))
    await db.commit()


# ============================================================================
# Categories
# ============================================================================


async def test_category_created_active(desserts):
    assert desserts.status == CategoryStatus.ACTIVE


async def test_duplicate_category(categories, desserts):
    with pytest.raises(DuplicateError):
        await categories.create(CategoryCreate(name="Desserts"))


async def test_category_list_counts_products(categories, products, desserts):
    await categories.create(CategoryCreate(name="Drinks"))
    await products.create(ProductCreate(name="Flan", price=6.5, category_id=desserts.id))

    counts = {c.name: n for c, n in await categories.list()}

    assert counts == {"Desserts": 1, "Drinks": 0}


async def test_inactive_categories_can_be_hidden(categories, desserts):
    await categories.update(desserts.id, CategoryUpdate(status=CategoryStatus.INACTIVE))

    assert await categories.list(include_inactive=False) == []
    assert len(await categories.list()) == 1


async def test_empty_category_is_deleted(categories, desserts):
    outcome = await categories.delete(desserts.id)

    assert outcome == DeletionOutcome.DELETED
    with pytest.raises(NotFoundError):
        await categories.get(desserts.id)


async def test_category_with_products_is_deactivated(categories, products, desserts):
    await products.create(ProductCreate(name="Flan", price=6.5, category_id=desserts.id))

    outcome = await categories.delete(desserts.id)

    assert outcome == DeletionOutcome.DEACTIVATED
    assert (await categories.get(desserts.id)).status == CategoryStatus.INACTIVE


# ============================================================================
# Products
# ============================================================================


async def test_create_product(products, desserts):
    product = await products.create(
        ProductCreate(name="Flan", price=6.5, category_id=desserts.id, stock=10)
    )

    assert product.status == ProductStatus.ACTIVE
    assert product.category.name == "Desserts"


async def test_product_without_stock_starts_out_of_stock(products, desserts):
    product = await products.create(
        ProductCreate(name="Flan", price=6.5, category_id=desserts.id, stock=0)
    )

    assert product.status == ProductStatus.OUT_OF_STOCK


@pytest.mark.parametrize("price", [0, -3.5, float("nan"), float("inf")])
async def test_price_must_be_positive(products, desserts, price):
    with pytest.raises(ValidationError):
        await products.create(ProductCreate(name="Flan", price=price, category_id=desserts.id))


async def test_update_rejects_nan_price(products, desserts):
    flan = await products.create(ProductCreate(name="Flan", price=5, category_id=desserts.id))

    with pytest.raises(ValidationError):
        await products.update(flan.id, ProductUpdate(price=float("nan")))
    assert (await products.get(flan.id)).price == 5


async def test_commit_reports_other_constraint_failures_as_unexpected(db):
    db.add(Category(name=None))

    with pytest.raises(UnexpectedError):
        await BaseResourceService(db)._commit("A category with that name already exists")


async def test_commit_reports_unique_violation_as_duplicate(db, desserts):
    db.add(Category(name="Desserts"))

    with pytest.raises(DuplicateError, match="already exists"):
        await BaseResourceService(db)._commit("A category with that name already exists")


async def test_product_needs_existing_category(products):
    with pytest.raises(NotFoundError):
        await products.create(ProductCreate(name="Flan", price=6.5, category_id=404))


async def test_product_names_are_unique_per_category(categories, products, desserts):
    drinks = await categories.create(CategoryCreate(name="Drinks"))
    await products.create(ProductCreate(name="Special", price=5, category_id=desserts.id))

    with pytest.raises(DuplicateError):
        await products.create(ProductCreate(name="Special", price=5, category_id=desserts.id))

    other = await products.create(ProductCreate(name="Special", price=3, category_id=drinks.id))
    assert other.category_id == drinks.id


async def test_update_can_keep_own_name(products, desserts):
    product = await products.create(ProductCreate(name="Flan", price=6.5, category_id=desserts.id))

    updated = await products.update(product.id, ProductUpdate(name="Flan", price=7.0))

    assert updated.price == 7.0


async def test_stock_drives_status(products, desserts):
    product = await products.create(
        ProductCreate(name="Flan", price=6.5, category_id=desserts.id, stock=3)
    )

    emptied = await products.update(product.id, ProductUpdate(stock=0))
    assert emptied.status == ProductStatus.OUT_OF_STOCK

    restocked = await products.update(product.id, ProductUpdate(stock=12))
    assert restocked.status == ProductStatus.ACTIVE


async def test_referenced_product_cannot_be_deactivated(db, products, desserts):
    product = await products.create(ProductCreate(name="Flan", price=6.5, category_id=desserts.id))
    await reference_in_order(db, product.id)

    with pytest.raises(ConflictError):
        await products.update(product.id, ProductUpdate(status=ProductStatus.INACTIVE))
    assert (await products.get(product.id)).status == ProductStatus.ACTIVE


async def test_delete_referenced_product_deactivates_it(db, products, desserts):
    product = await products.create(ProductCreate(name="Flan", price=6.5, category_id=desserts.id))
    await reference_in_order(db, product.id)

    outcome = await products.delete(product.id)

    assert outcome == DeletionOutcome.DEACTIVATED
    assert (await products.get(product.id)).status == ProductStatus.INACTIVE


async def test_delete_unreferenced_product(products, desserts):
    product = await products.create(ProductCreate(name="Flan", price=6.5, category_id=desserts.id))

    assert await products.delete(product.id) == DeletionOutcome.DELETED
    with pytest.raises(NotFoundError):
        await products.get(product.id)


async def test_list_filters(products, desserts):
    await products.create(ProductCreate(name="Chocolate Cake", price=7, category_id=desserts.id))
    await products.create(ProductCreate(name="Flan", price=6.5, category_id=desserts.id, stock=0))

    assert [p.name for p in await products.list(search="choc")] == ["Chocolate Cake"]
    assert [p.name for p in await products.list(status=ProductStatus.OUT_OF_STOCK)] == ["Flan"]
    assert len(await products.list(category_id=desserts.id)) == 2
