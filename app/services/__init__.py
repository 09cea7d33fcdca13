"""
                        Services Module

Business logic between the API routers and the database. Each resource
service wraps one request's AsyncSession and runs the guards in
``app.services.guards`` before writing.

Services:
    - auth: password policy, login attempt tracker, credential service
    - tables: dining tables and table categories
    - menu: product categories and products
    - orders: table orders and the table workflow
    - users: staff users and roles
    - kitchen: kitchen notifications for pending order items
"""

from app.services.menu import CategoryService, ProductService
from app.services.orders import OrderService
from app.services.tables import TableCategoryService, TableService
from app.services.users import RoleService, UserService

__all__ = [
    "CategoryService",
    "OrderService",
    "ProductService",
    "RoleService",
    "TableCategoryService",
    "TableService",
    "UserService",
]
