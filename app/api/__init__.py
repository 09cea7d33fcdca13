"""
API Routers

Every router is mounted under ``/api`` by ``app.main``. Reads need a
valid bearer token; writes additionally need the resource's permission.
"""

from app.api import auth, categories, health, orders, products, roles, tables, users

__all__ = ["auth", "categories", "health", "orders", "products", "roles", "tables", "users"]
