"""
SQLAlchemy Database Models

Restaurant management schema:
- Roles, permissions and staff users
- Dining tables grouped by table category
- Menu products grouped by category
- Table orders and their order items

Version: 1.0.0
"""

import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


# =============================================================================
# STATUS ENUMERATIONS
# =============================================================================

class Permission(str, enum.Enum):
    """Permissions a role can grant."""
    MANAGE_USERS = "MANAGE_USERS"
    MANAGE_ROLES = "MANAGE_ROLES"
    MANAGE_TABLES = "MANAGE_TABLES"
    MANAGE_CATEGORIES = "MANAGE_CATEGORIES"
    MANAGE_PRODUCTS = "MANAGE_PRODUCTS"
    MANAGE_ORDERS = "MANAGE_ORDERS"
    MANAGE_RESERVATIONS = "MANAGE_RESERVATIONS"
    VIEW_REPORTS = "VIEW_REPORTS"
    PROCESS_PAYMENTS = "PROCESS_PAYMENTS"
    KITCHEN_ACCESS = "KITCHEN_ACCESS"


class TableStatus(str, enum.Enum):
    """Dining table workflow."""
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    BILL_PENDING = "BILL_PENDING"
    RESERVED = "RESERVED"


class CategoryStatus(str, enum.Enum):
    """Shared by product categories and table categories."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class ProductStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    OUT_OF_STOCK = "OUT_OF_STOCK"


class OrderStatus(str, enum.Enum):
    """Order lifecycle. CLOSED and CANCELLED are terminal."""
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"


class OrderItemStatus(str, enum.Enum):
    """Kitchen progress of a single order line."""
    PENDING = "PENDING"
    PREPARING = "PREPARING"
    READY = "READY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


# =============================================================================
# USERS & ROLES
# =============================================================================

class Role(Base):
    """A named set of permissions assigned to staff users."""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True)
    description = Column(String(255), nullable=True)

    permissions = relationship(
        "RolePermission",
        back_populates="role",
        cascade="all, delete-orphan",
    )
    users = relationship("User", back_populates="role")

    @property
    def permission_names(self) -> list[str]:
        return [p.permission.value for p in self.permissions]

    def __repr__(self):
        return f"<Role #{self.id} - {self.name}>"


class RolePermission(Base):
    __tablename__ = "role_permissions"
    __table_args__ = (UniqueConstraint("role_id", "permission"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True)
    permission = Column(Enum(Permission), nullable=False)

    role = relationship("Role", back_populates="permissions")


class User(Base):
    """
    Staff account.

    The email doubles as the login identifier and is compared
    case-sensitively.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    role = relationship("Role", back_populates="users")

    def __repr__(self):
        return f"<User #{self.id} - {self.email}>"


# =============================================================================
# TABLES
# =============================================================================

class TableCategory(Base):
    """Dining area grouping (terrace, main hall, bar...)."""
    __tablename__ = "table_categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    status = Column(Enum(CategoryStatus), default=CategoryStatus.ACTIVE, nullable=False)

    tables = relationship("DiningTable", back_populates="category")


class DiningTable(Base):
    __tablename__ = "dining_tables"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    number = Column(String(20), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    capacity = Column(Integer, nullable=False)
    status = Column(
        Enum(TableStatus),
        default=TableStatus.AVAILABLE,
        nullable=False,
        index=True
    )
    category_id = Column(Integer, ForeignKey("table_categories.id"), nullable=True, index=True)

    category = relationship("TableCategory", back_populates="tables")
    orders = relationship("Order", back_populates="table")

    def __repr__(self):
        return f"<DiningTable #{self.id} - {self.number} - {self.status.value}>"


# =============================================================================
# MENU
# =============================================================================

class Category(Base):
    """Product category. Soft-deleted (INACTIVE) while it has products."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    status = Column(Enum(CategoryStatus), default=CategoryStatus.ACTIVE, nullable=False)

    products = relationship("Product", back_populates="category")


class Product(Base):
    """
    Menu product.

    Names are unique within a category. Products referenced by any
    historical order item are never hard-deleted.
    """
    __tablename__ = "products"
    __table_args__ = (UniqueConstraint("name", "category_id"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    stock = Column(Integer, nullable=True)
    image_url = Column(String(500), nullable=True)
    status = Column(
        Enum(ProductStatus),
        default=ProductStatus.ACTIVE,
        nullable=False,
        index=True
    )
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    category = relationship("Category", back_populates="products")

    def __repr__(self):
        return f"<Product #{self.id} - {self.name} - {self.status.value}>"


# =============================================================================
# ORDERS
# =============================================================================

class Order(Base):
    """An order placed at a dining table by a waiter."""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    # Kept (as NULL) when the table is removed so order history survives
    table_id = Column(Integer, ForeignKey("dining_tables.id", ondelete="SET NULL"), nullable=True, index=True)
    waiter_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    status = Column(
        Enum(OrderStatus),
        default=OrderStatus.OPEN,
        nullable=False,
        index=True
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    closed_at = Column(DateTime(timezone=True), nullable=True)

    table = relationship("DiningTable", back_populates="orders")
    waiter = relationship("User")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    def __repr__(self):
        return f"<Order #{self.id} - table {self.table_id} - {self.status.value}>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(
        Enum(OrderItemStatus),
        default=OrderItemStatus.PENDING,
        nullable=False
    )

    order = relationship("Order", back_populates="items")
    product = relationship("Product")
