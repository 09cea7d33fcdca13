"""
Order Endpoints

Orders drive the table workflow: opening one occupies the table, closing
it leaves the bill pending and cancelling or deleting it frees the table.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_permission
from app.database import get_db
from app.models import OrderStatus, Permission
from app.schemas import (
    ErrorResponse,
    MessageResponse,
    OrderCreate,
    OrderItemResponse,
    OrderItemStatusUpdate,
    OrderResponse,
    OrderUpdate,
)
from app.services.orders import OrderService

router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
    dependencies=[Depends(get_current_user)],
)

can_manage = Depends(require_permission(Permission.MANAGE_ORDERS))


@router.get("", response_model=list[OrderResponse], summary="List orders, newest first")
async def list_orders(db: AsyncSession = Depends(get_db)) -> list[OrderResponse]:
    return [OrderResponse.from_model(o) for o in await OrderService(db).list()]


@router.get("/table/{table_id}", response_model=list[OrderResponse])
async def orders_by_table(table_id: int, db: AsyncSession = Depends(get_db)) -> list[OrderResponse]:
    return [OrderResponse.from_model(o) for o in await OrderService(db).by_table(table_id)]


@router.get(
    "/current/{table_id}",
    response_model=Optional[OrderResponse],
    summary="Open order of a table (null when none)",
)
async def current_order(table_id: int, db: AsyncSession = Depends(get_db)) -> Optional[OrderResponse]:
    order = await OrderService(db).current_for_table(table_id)
    return OrderResponse.from_model(order) if order else None


@router.get("/waiter/{waiter_id}", response_model=list[OrderResponse])
async def orders_by_waiter(waiter_id: int, db: AsyncSession = Depends(get_db)) -> list[OrderResponse]:
    return [OrderResponse.from_model(o) for o in await OrderService(db).by_waiter(waiter_id)]


@router.get("/status/{order_status}", response_model=list[OrderResponse])
async def orders_by_status(
    order_status: OrderStatus,
    db: AsyncSession = Depends(get_db),
) -> list[OrderResponse]:
    return [OrderResponse.from_model(o) for o in await OrderService(db).by_status(order_status)]


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: int, db: AsyncSession = Depends(get_db)) -> OrderResponse:
    return OrderResponse.from_model(await OrderService(db).get(order_id))


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    dependencies=[can_manage],
)
async def create_order(data: OrderCreate, db: AsyncSession = Depends(get_db)) -> OrderResponse:
    """
    Open an order on an AVAILABLE table.

    Every product must be ACTIVE; item prices default to the current
    product price.
    """
    return OrderResponse.from_model(await OrderService(db).create(data))


@router.put(
    "/{order_id}",
    response_model=OrderResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    dependencies=[can_manage],
)
async def update_order(
    order_id: int,
    data: OrderUpdate,
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    return OrderResponse.from_model(await OrderService(db).update(order_id, data))


@router.put(
    "/{order_id}/items/{item_id}/status",
    response_model=OrderItemResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    dependencies=[can_manage],
)
async def update_item_status(
    order_id: int,
    item_id: int,
    data: OrderItemStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> OrderItemResponse:
    item = await OrderService(db).update_item_status(order_id, item_id, data.status)
    return OrderItemResponse.from_model(item)


@router.delete("/{order_id}", response_model=MessageResponse, dependencies=[can_manage])
async def delete_order(order_id: int, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    await OrderService(db).delete(order_id)
    return MessageResponse(message="Order deleted successfully")
