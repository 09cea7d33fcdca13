"""
Entity State-Transition Guards

Precondition checks that veto mutations violating a domain invariant.
Guards are pure: the resource services gather the facts (current status,
"is there an open order?", "how many products?") and the guard either
returns or raises a typed, recoverable error. Nothing is written before
a guard runs, so a rejected operation leaves the store untouched.
"""

import math
from enum import Enum
from typing import Optional

from app.core.errors import ConflictError, DuplicateError, ValidationError
from app.models import (
    OrderStatus,
    ProductStatus,
    TableStatus,
)


class DeletionOutcome(str, Enum):
    """How a delete request was carried out."""
    DELETED = "deleted"
    DEACTIVATED = "deactivated"


# Tables in these states hold guests and cannot be removed
BUSY_TABLE_STATUSES = frozenset({TableStatus.OCCUPIED, TableStatus.BILL_PENDING})

ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.OPEN: frozenset({OrderStatus.CLOSED, OrderStatus.CANCELLED}),
    OrderStatus.CLOSED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


# =============================================================================
# UNIQUENESS
# =============================================================================

def ensure_unique(taken: bool, message: str) -> None:
    """
    Raise when a uniqueness lookup found another record.

    Callers exclude the record being updated from the lookup.
    """
    if taken:
        raise DuplicateError(message)


# =============================================================================
# TABLES
# =============================================================================

def ensure_table_status_change_allowed(
    current: TableStatus,
    requested: Optional[TableStatus],
    has_open_order: bool,
) -> None:
    if requested is None or requested == current:
        return
    if has_open_order:
        raise ConflictError("Cannot change the table status while it has active orders")


def ensure_table_deletable(status: TableStatus, has_open_order: bool) -> None:
    if status in BUSY_TABLE_STATUSES:
        raise ConflictError("Cannot delete a table that is occupied or pending payment")
    if has_open_order:
        raise ConflictError("Cannot delete a table with active orders")


def ensure_table_category_deletable(table_count: int) -> None:
    if table_count > 0:
        raise ConflictError("Cannot delete a table category that has tables assigned")


# =============================================================================
# PRODUCTS & CATEGORIES
# =============================================================================

def ensure_positive_price(price: Optional[float]) -> None:
    if price is not None and (not math.isfinite(price) or price <= 0):
        raise ValidationError("Price must be a positive value")


def ensure_product_status_change_allowed(
    current: ProductStatus,
    requested: Optional[ProductStatus],
    has_order_items: bool,
) -> None:
    if (
        requested == ProductStatus.INACTIVE
        and current == ProductStatus.ACTIVE
        and has_order_items
    ):
        raise ConflictError("Cannot deactivate a product that has historical orders")


def initial_product_status(stock: Optional[int]) -> ProductStatus:
    if stock is not None and stock <= 0:
        return ProductStatus.OUT_OF_STOCK
    return ProductStatus.ACTIVE


def resolve_product_status(
    current: ProductStatus,
    requested: Optional[ProductStatus],
    stock: Optional[int],
) -> ProductStatus:
    """
    Status a product ends up in after an update.

    An explicit status wins. Otherwise running out of stock marks the
    product OUT_OF_STOCK and restocking an OUT_OF_STOCK product makes it
    ACTIVE again.
    """
    if requested is not None:
        return requested
    if stock is not None and stock <= 0:
        return ProductStatus.OUT_OF_STOCK
    if stock is not None and stock > 0 and current == ProductStatus.OUT_OF_STOCK:
        return ProductStatus.ACTIVE
    return current


def product_deletion_outcome(has_order_items: bool) -> DeletionOutcome:
    """Products referenced by any order item are only deactivated."""
    return DeletionOutcome.DEACTIVATED if has_order_items else DeletionOutcome.DELETED


def category_deletion_outcome(product_count: int) -> DeletionOutcome:
    """Categories that still have products are only deactivated."""
    return DeletionOutcome.DEACTIVATED if product_count > 0 else DeletionOutcome.DELETED


# =============================================================================
# ORDERS
# =============================================================================

def ensure_table_available_for_order(status: TableStatus) -> None:
    if status != TableStatus.AVAILABLE:
        raise ConflictError("The table is not available")


def ensure_product_orderable(name: str, status: ProductStatus) -> None:
    if status != ProductStatus.ACTIVE:
        raise ConflictError(f"Product {name} is not active")


def ensure_order_transition(current: OrderStatus, requested: Optional[OrderStatus]) -> None:
    if requested is None or requested == current:
        return
    if requested not in ORDER_TRANSITIONS[current]:
        raise ConflictError(
            f"Cannot change order status from {current.value} to {requested.value}"
        )


def ensure_order_editable(status: OrderStatus) -> None:
    if status != OrderStatus.OPEN:
        raise ConflictError(f"Cannot modify items of a {status.value} order")


def table_status_after_order(status: OrderStatus) -> Optional[TableStatus]:
    """Table status implied by an order entering ``status`` (None = unchanged)."""
    if status == OrderStatus.CLOSED:
        return TableStatus.BILL_PENDING
    if status == OrderStatus.CANCELLED:
        return TableStatus.AVAILABLE
    return None


# =============================================================================
# USERS & ROLES
# =============================================================================

def ensure_role_deletable(user_count: int) -> None:
    if user_count > 0:
        raise ConflictError("Cannot delete a role that has users assigned")


def ensure_admin_remains(is_active_admin: bool, active_admin_count: int) -> None:
    """The last active administrator cannot be deactivated."""
    if is_active_admin and active_admin_count <= 1:
        raise ConflictError("Cannot deactivate the only active administrator")
