"""
Pydantic Schemas for Request/Response Validation

Explicit input/output structures for every endpoint, so the services
never deal with raw request bodies.

Version: 1.0.0
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models import (
    CategoryStatus,
    Order,
    OrderItem,
    OrderItemStatus,
    OrderStatus,
    Permission,
    ProductStatus,
    Role,
    TableStatus,
    User,
)

EMAIL_PATTERN = re.compile(r'^[\w\.\+-]+@[\w\.-]+\.\w+$')


def _check_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not EMAIL_PATTERN.match(v):
        raise ValueError('Invalid email format')
    return v


# =============================================================================
# AUTH
# =============================================================================

class RegisterRequest(BaseModel):
    email: str = Field(..., max_length=255, examples=["waiter@restaurant.com"])
    password: str = Field(..., min_length=1, max_length=128)
    name: str = Field(..., min_length=1, max_length=100, examples=["Ana Torres"])
    role_id: int = Field(..., ge=1)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    message: str
    token: str


class CurrentUserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    permissions: List[str]


# =============================================================================
# USERS & ROLES
# =============================================================================

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=128)
    role_id: int = Field(..., ge=1)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = Field(None, min_length=1, max_length=128)
    role_id: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    is_active: bool

    @classmethod
    def from_model(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role.name,
            is_active=user.is_active,
        )


class UserMutationResponse(BaseModel):
    message: str
    user: UserResponse


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, examples=["WAITER"])
    description: Optional[str] = Field(None, max_length=255)
    permissions: List[Permission] = Field(default_factory=list)


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=255)
    permissions: Optional[List[Permission]] = None


class RoleResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    permissions: List[str]

    @classmethod
    def from_model(cls, role: Role) -> "RoleResponse":
        return cls(
            id=role.id,
            name=role.name,
            description=role.description,
            permissions=role.permission_names,
        )


class RoleMutationResponse(BaseModel):
    message: str
    role: RoleResponse


# =============================================================================
# TABLES
# =============================================================================

class TableCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Terrace"])
    description: Optional[str] = None
    status: CategoryStatus = CategoryStatus.ACTIVE


class TableCategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    status: Optional[CategoryStatus] = None


class TableCategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str]
    status: CategoryStatus


class TableCreate(BaseModel):
    number: str = Field(..., min_length=1, max_length=20, examples=["T1"])
    capacity: int = Field(..., ge=1, le=100)
    description: Optional[str] = None
    status: TableStatus = TableStatus.AVAILABLE
    category_id: Optional[int] = None


class TableUpdate(BaseModel):
    number: Optional[str] = Field(None, min_length=1, max_length=20)
    capacity: Optional[int] = Field(None, ge=1, le=100)
    description: Optional[str] = None
    status: Optional[TableStatus] = None
    category_id: Optional[int] = None


class TableResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    number: str
    capacity: int
    description: Optional[str]
    status: TableStatus
    category_id: Optional[int]
    category: Optional[TableCategoryResponse] = None


# =============================================================================
# MENU
# =============================================================================

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Desserts"])
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    status: Optional[CategoryStatus] = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    status: CategoryStatus
    product_count: int = 0


class CategorySummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    status: CategoryStatus


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Flan"])
    description: Optional[str] = None
    price: float = Field(..., examples=[6.5])
    category_id: int
    stock: Optional[int] = None
    image_url: Optional[str] = Field(None, max_length=500)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = None
    category_id: Optional[int] = None
    stock: Optional[int] = None
    image_url: Optional[str] = Field(None, max_length=500)
    status: Optional[ProductStatus] = None


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str]
    price: float
    stock: Optional[int]
    image_url: Optional[str]
    status: ProductStatus
    category_id: int
    category: Optional[CategorySummary] = None


class DeletionResponse(BaseModel):
    """Result of a delete request that may degrade to a soft delete."""
    message: str
    outcome: str


# =============================================================================
# ORDERS
# =============================================================================

class OrderItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1, le=99)
    unit_price: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    notes: Optional[str] = Field(None, max_length=500)


class OrderCreate(BaseModel):
    table_id: int
    waiter_id: Optional[int] = None
    items: List[OrderItemCreate] = Field(..., min_length=1)


class OrderItemUpdate(BaseModel):
    id: int
    quantity: Optional[int] = Field(None, ge=1, le=99)
    unit_price: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    notes: Optional[str] = Field(None, max_length=500)
    status: Optional[OrderItemStatus] = None


class OrderUpdate(BaseModel):
    status: Optional[OrderStatus] = None
    items: List[OrderItemUpdate] = Field(default_factory=list)


class OrderItemStatusUpdate(BaseModel):
    status: OrderItemStatus


class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str]
    quantity: int
    unit_price: float
    notes: Optional[str]
    status: OrderItemStatus
    subtotal: float

    @classmethod
    def from_model(cls, item: OrderItem) -> "OrderItemResponse":
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product.name if item.product else None,
            quantity=item.quantity,
            unit_price=item.unit_price,
            notes=item.notes,
            status=item.status,
            subtotal=round(item.quantity * item.unit_price, 2),
        )


class OrderResponse(BaseModel):
    id: int
    table_id: Optional[int]
    table_number: Optional[str]
    waiter_id: Optional[int]
    status: OrderStatus
    items: List[OrderItemResponse]
    total: float
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    closed_at: Optional[datetime]

    @classmethod
    def from_model(cls, order: Order) -> "OrderResponse":
        items = [OrderItemResponse.from_model(i) for i in order.items]
        return cls(
            id=order.id,
            table_id=order.table_id,
            table_number=order.table.number if order.table else None,
            waiter_id=order.waiter_id,
            status=order.status,
            items=items,
            total=round(sum(i.subtotal for i in items), 2),
            created_at=order.created_at,
            updated_at=order.updated_at,
            closed_at=order.closed_at,
        )


# =============================================================================
# GENERIC
# =============================================================================

class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None
    errors: Optional[List[str]] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    redis: str
    timestamp: datetime
