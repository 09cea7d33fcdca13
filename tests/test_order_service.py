"""
Order service: the table workflow, item edits and kitchen notifications.
"""

import pytest

from app.core.errors import ConflictError, NotFoundError
from app.models import (
    Category,
    DiningTable,
    OrderItemStatus,
    OrderStatus,
    Product,
    ProductStatus,
    TableStatus,
)
from app.schemas import OrderCreate, OrderItemCreate, OrderItemUpdate, OrderUpdate
from app.services.kitchen import RecordingKitchenNotifier, build_kitchen_payload
from app.services.orders import OrderService
from app.services.tables import TableService


@pytest.fixture
def kitchen() -> RecordingKitchenNotifier:
    return RecordingKitchenNotifier()


@pytest.fixture
def orders(db, kitchen) -> OrderService:
    return OrderService(db, notifier=kitchen)


@pytest.fixture
async def menu(db) -> dict[str, Product]:
    mains = Category(name="Mains")
    db.add(mains)
    await db.flush()
    burger = Product(name="Burger", price=12.5, category_id=mains.id)
    soup = Product(name="Soup", price=6.0, category_id=mains.id, status=ProductStatus.INACTIVE)
    db.add_all([burger, soup])
    await db.commit()
    return {"burger": burger, "soup": soup}


@pytest.fixture
async def table(db) -> DiningTable:
    table = DiningTable(number="1", capacity=4)
    db.add(table)
    await db.commit()
    return table


def new_order(table_id: int, product_id: int, quantity: int = 2, **kwargs) -> OrderCreate:
    return OrderCreate(
        table_id=table_id,
        items=[OrderItemCreate(product_id=product_id, quantity=quantity, **kwargs)],
    )


async def table_status(db, table_id: int) -> TableStatus:
    return (await TableService(db).get(table_id)).status


async def test_create_occupies_table_and_notifies_kitchen(db, orders, kitchen, menu, table):
    order = await orders.create(new_order(table.id, menu["burger"].id, notes="no onions"))

    assert order.status == OrderStatus.OPEN
    assert order.items[0].unit_price == 12.5
    assert order.items[0].status == OrderItemStatus.PENDING
    assert await table_status(db, table.id) == TableStatus.OCCUPIED

    assert len(kitchen.sent) == 1
    ticket = kitchen.sent[0]
    assert ticket["order_id"] == order.id
    assert ticket["table_number"] == "1"
    assert ticket["items"][0]["product_name"] == "Burger"
    assert ticket["items"][0]["notes"] == "no onions"


async def test_explicit_unit_price_is_kept(orders, menu, table):
    order = await orders.create(new_order(table.id, menu["burger"].id, unit_price=10.0))

    assert order.items[0].unit_price == 10.0


async def test_occupied_table_rejects_second_order(orders, menu, table):
    await orders.create(new_order(table.id, menu["burger"].id))

    with pytest.raises(ConflictError, match="not available"):
        await orders.create(new_order(table.id, menu["burger"].id))


async def test_inactive_product_rejected_and_table_untouched(db, orders, menu, table):
    with pytest.raises(ConflictError, match="Soup"):
        await orders.create(new_order(table.id, menu["soup"].id))

    assert await table_status(db, table.id) == TableStatus.AVAILABLE
    assert await orders.list() == []


async def test_unknown_table_product_and_waiter(orders, menu, table):
    with pytest.raises(NotFoundError):
        await orders.create(new_order(999, menu["burger"].id))
    with pytest.raises(NotFoundError):
        await orders.create(new_order(table.id, 999))
    with pytest.raises(NotFoundError):
        await orders.create(OrderCreate(
            table_id=table.id,
            waiter_id=999,
            items=[OrderItemCreate(product_id=menu["burger"].id, quantity=1)],
        ))


async def test_close_leaves_bill_pending(db, orders, menu, table):
    order = await orders.create(new_order(table.id, menu["burger"].id))

    closed = await orders.update(order.id, OrderUpdate(status=OrderStatus.CLOSED))

    assert closed.status == OrderStatus.CLOSED
    assert closed.closed_at is not None
    assert await table_status(db, table.id) == TableStatus.BILL_PENDING


async def test_cancel_frees_table(db, orders, menu, table):
    order = await orders.create(new_order(table.id, menu["burger"].id))

    await orders.update(order.id, OrderUpdate(status=OrderStatus.CANCELLED))

    assert await table_status(db, table.id) == TableStatus.AVAILABLE


async def test_closed_order_cannot_reopen_or_change_items(orders, menu, table):
    order = await orders.create(new_order(table.id, menu["burger"].id))
    await orders.update(order.id, OrderUpdate(status=OrderStatus.CLOSED))

    with pytest.raises(ConflictError):
        await orders.update(order.id, OrderUpdate(status=OrderStatus.OPEN))
    with pytest.raises(ConflictError):
        await orders.update(order.id, OrderUpdate(
            items=[OrderItemUpdate(id=order.items[0].id, quantity=5)]
        ))
    with pytest.raises(ConflictError):
        await orders.update_item_status(order.id, order.items[0].id, OrderItemStatus.READY)


async def test_edit_items_of_open_order(orders, kitchen, menu, table):
    order = await orders.create(new_order(table.id, menu["burger"].id))
    item_id = order.items[0].id

    updated = await orders.update(order.id, OrderUpdate(
        items=[OrderItemUpdate(id=item_id, quantity=3, notes="extra cheese")]
    ))

    assert updated.items[0].quantity == 3
    assert updated.items[0].notes == "extra cheese"
    assert len(kitchen.sent) == 2


async def test_unknown_item_in_update(orders, menu, table):
    order = await orders.create(new_order(table.id, menu["burger"].id))

    with pytest.raises(NotFoundError):
        await orders.update(order.id, OrderUpdate(items=[OrderItemUpdate(id=999, quantity=1)]))


async def test_item_status_progress(orders, menu, table):
    order = await orders.create(new_order(table.id, menu["burger"].id))
    item_id = order.items[0].id

    item = await orders.update_item_status(order.id, item_id, OrderItemStatus.PREPARING)

    assert item.status == OrderItemStatus.PREPARING
    assert item.product.name == "Burger"
    with pytest.raises(NotFoundError):
        await orders.update_item_status(order.id, 999, OrderItemStatus.READY)


async def test_delete_order_frees_table(db, orders, menu, table):
    order = await orders.create(new_order(table.id, menu["burger"].id))

    await orders.delete(order.id)

    assert await table_status(db, table.id) == TableStatus.AVAILABLE
    with pytest.raises(NotFoundError):
        await orders.get(order.id)


async def test_queries(db, orders, menu, table):
    order = await orders.create(new_order(table.id, menu["burger"].id))

    assert (await orders.current_for_table(table.id)).id == order.id
    assert [o.id for o in await orders.by_table(table.id)] == [order.id]
    assert [o.id for o in await orders.by_status(OrderStatus.OPEN)] == [order.id]
    assert await orders.by_status(OrderStatus.CLOSED) == []

    await orders.update(order.id, OrderUpdate(status=OrderStatus.CLOSED))
    assert await orders.current_for_table(table.id) is None


async def test_nothing_pending_means_no_ticket(orders, menu, table):
    order = await orders.create(new_order(table.id, menu["burger"].id))
    await orders.update_item_status(order.id, order.items[0].id, OrderItemStatus.DELIVERED)

    assert build_kitchen_payload(await orders.get(order.id)) is None
