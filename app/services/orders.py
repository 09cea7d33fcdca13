"""
Order Service

Table orders and the table workflow they drive:

    AVAILABLE --create--> OCCUPIED --close--> BILL_PENDING
        ^                    |
        +------cancel--------+

Deleting or cancelling an order frees its table once no other open
order remains on it. Orders with PENDING items are handed to the
kitchen notifier after every create or update.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.core.errors import NotFoundError
from app.models import (
    DiningTable,
    Order,
    OrderItem,
    OrderItemStatus,
    OrderStatus,
    Product,
    TableStatus,
    User,
)
from app.schemas import OrderCreate, OrderUpdate
from app.services import guards
from app.services.base import BaseResourceService
from app.services.kitchen import BaseKitchenNotifier, build_kitchen_payload, get_kitchen_notifier
from app.services.tables import TableService

logger = logging.getLogger(__name__)


class OrderService(BaseResourceService):
    """
    Attributes:
        db: The request's database session
        notifier: Where kitchen payloads go (defaults to the configured one)
    """

    def __init__(self, db, notifier: Optional[BaseKitchenNotifier] = None):
        super().__init__(db)
        self.notifier = notifier or get_kitchen_notifier()
        self.tables = TableService(db)

    def _query(self):
        return select(Order).options(
            selectinload(Order.items).selectinload(OrderItem.product),
            selectinload(Order.table),
        )

    async def _all(self, *conditions) -> List[Order]:
        stmt = self._query().where(*conditions).order_by(Order.created_at.desc(), Order.id.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def list(self) -> List[Order]:
        return await self._all()

    async def get(self, order_id: int) -> Order:
        result = await self.db.execute(
            self._query()
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise NotFoundError("Order not found")
        return order

    async def by_table(self, table_id: int) -> List[Order]:
        return await self._all(Order.table_id == table_id)

    async def by_waiter(self, waiter_id: int) -> List[Order]:
        return await self._all(Order.waiter_id == waiter_id)

    async def by_status(self, status: OrderStatus) -> List[Order]:
        return await self._all(Order.status == status)

    async def current_for_table(self, table_id: int) -> Optional[Order]:
        """The open order on a table, if any."""
        orders = await self._all(Order.table_id == table_id, Order.status == OrderStatus.OPEN)
        return orders[0] if orders else None

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create(self, data: OrderCreate) -> Order:
        table = await self.db.get(DiningTable, data.table_id)
        if table is None:
            raise NotFoundError("Table not found")
        guards.ensure_table_available_for_order(table.status)

        if data.waiter_id is not None and await self.db.get(User, data.waiter_id) is None:
            raise NotFoundError("Waiter not found")

        items = []
        for line in data.items:
            product = await self.db.get(Product, line.product_id)
            if product is None:
                raise NotFoundError(f"Product #{line.product_id} not found")
            guards.ensure_product_orderable(product.name, product.status)
            items.append(OrderItem(
                product_id=product.id,
                quantity=line.quantity,
                unit_price=line.unit_price if line.unit_price is not None else product.price,
                notes=line.notes,
                status=OrderItemStatus.PENDING,
            ))

        order = Order(
            table_id=table.id,
            waiter_id=data.waiter_id,
            status=OrderStatus.OPEN,
            items=items,
        )
        self.db.add(order)
        table.status = TableStatus.OCCUPIED
        await self.db.commit()

        logger.info(f"Order #{order.id} opened on table {table.number} ({len(items)} items)")
        order = await self.get(order.id)
        self._notify_kitchen(order)
        return order

    async def update(self, order_id: int, data: OrderUpdate) -> Order:
        order = await self.get(order_id)

        if data.items:
            guards.ensure_order_editable(order.status)
        guards.ensure_order_transition(order.status, data.status)

        items_by_id = {item.id: item for item in order.items}
        for change in data.items:
            item = items_by_id.get(change.id)
            if item is None:
                raise NotFoundError(f"Order item #{change.id} not found in order #{order_id}")
            for field, value in change.model_dump(exclude={"id"}, exclude_none=True).items():
                setattr(item, field, value)

        if data.status is not None and data.status != order.status:
            await self._apply_status(order, data.status)

        await self.db.commit()
        order = await self.get(order_id)
        if order.status == OrderStatus.OPEN:
            self._notify_kitchen(order)
        return order

    async def update_item_status(
        self,
        order_id: int,
        item_id: int,
        status: OrderItemStatus,
    ) -> OrderItem:
        order = await self.get(order_id)
        guards.ensure_order_editable(order.status)

        item = next((i for i in order.items if i.id == item_id), None)
        if item is None:
            raise NotFoundError(f"Order item #{item_id} not found in order #{order_id}")

        item.status = status
        await self.db.commit()
        logger.info(f"Order #{order_id} item #{item_id} -> {status.value}")

        order = await self.get(order_id)
        return next(i for i in order.items if i.id == item_id)

    async def delete(self, order_id: int) -> None:
        order = await self.get(order_id)
        table = order.table

        await self.db.delete(order)
        await self.db.flush()

        if table is not None and not await self.tables.has_open_order(table.id):
            table.status = TableStatus.AVAILABLE

        await self.db.commit()
        logger.info(f"Order #{order_id} deleted")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _apply_status(self, order: Order, status: OrderStatus) -> None:
        order.status = status
        if status != OrderStatus.OPEN:
            order.closed_at = datetime.now(timezone.utc)
        logger.info(f"Order #{order.id} -> {status.value}")

        table = order.table
        table_status = guards.table_status_after_order(status)
        if table is None or table_status is None:
            return
        if table_status == TableStatus.AVAILABLE and await self.tables.has_open_order(
            table.id, exclude_order_id=order.id
        ):
            return
        table.status = table_status

    def _notify_kitchen(self, order: Order) -> None:
        payload = build_kitchen_payload(order)
        if payload is not None:
            self.notifier.notify(payload)
