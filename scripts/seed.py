"""
Database Seed Script

Creates the default roles, an administrator account, a few menu
categories with products, and the dining room tables. Safe to run more
than once: existing rows (matched by name / email / number) are skipped.

Run from project root: python scripts/seed.py [--admin-password PASSWORD]
"""

import argparse
import asyncio
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from sqlalchemy import select

from app.core.config import get_settings, setup_logging
from app.database import async_session_maker, engine, init_db
from app.models import (
    Category,
    DiningTable,
    Permission,
    Product,
    Role,
    RolePermission,
    TableCategory,
    User,
)
from app.services.auth import get_password_hasher, validate_password

logger = logging.getLogger("seed")

ROLES = {
    "ADMIN": ("System administrator", list(Permission)),
    "MANAGER": ("Restaurant manager", [
        Permission.MANAGE_TABLES,
        Permission.MANAGE_CATEGORIES,
        Permission.MANAGE_PRODUCTS,
        Permission.MANAGE_ORDERS,
        Permission.MANAGE_RESERVATIONS,
        Permission.VIEW_REPORTS,
        Permission.PROCESS_PAYMENTS,
    ]),
    "WAITER": ("Waiter", [Permission.MANAGE_ORDERS, Permission.PROCESS_PAYMENTS]),
    "KITCHEN": ("Kitchen staff", [Permission.KITCHEN_ACCESS]),
}

MENU = {
    "Starters": [("Garlic Bread", 5.5), ("Caesar Salad", 8.9)],
    "Main Courses": [("Grilled Salmon", 18.5), ("Beef Burger", 14.0)],
    "Desserts": [("Tiramisu", 7.0), ("Flan", 6.5)],
    "Drinks": [("Lemonade", 3.0), ("Sparkling Water", 2.5)],
}

DINING_AREAS = {
    "Main Hall": [("1", 4), ("2", 4), ("3", 2), ("4", 6)],
    "Terrace": [("T1", 2), ("T2", 4)],
}


async def seed(admin_email: str, admin_password: str) -> None:
    validation = validate_password(admin_password)
    if not validation.is_valid:
        raise SystemExit(f"Admin password rejected: {'; '.join(validation.errors)}")

    await init_db()
    settings = get_settings()

    async with async_session_maker() as db:
        roles = {}
        for name, (description, permissions) in ROLES.items():
            role = (await db.execute(select(Role).where(Role.name == name))).scalar_one_or_none()
            if role is None:
                role = Role(
                    name=name,
                    description=description,
                    permissions=[RolePermission(permission=p) for p in permissions],
                )
                db.add(role)
                logger.info(f"Role {name} created")
            roles[name] = role
        await db.flush()

        admin = (await db.execute(select(User).where(User.email == admin_email))).scalar_one_or_none()
        if admin is None:
            db.add(User(
                name="System Admin",
                email=admin_email,
                password_hash=get_password_hasher().hash(admin_password),
                role_id=roles[settings.admin_role_name].id,
                is_active=True,
            ))
            logger.info(f"Admin user {admin_email} created")

        for category_name, products in MENU.items():
            category = (await db.execute(
                select(Category).where(Category.name == category_name)
            )).scalar_one_or_none()
            if category is None:
                category = Category(name=category_name)
                db.add(category)
                await db.flush()
                for product_name, price in products:
                    db.add(Product(name=product_name, price=price, category_id=category.id))
                logger.info(f"Category {category_name} created with {len(products)} products")

        for area_name, area_tables in DINING_AREAS.items():
            area = (await db.execute(
                select(TableCategory).where(TableCategory.name == area_name)
            )).scalar_one_or_none()
            if area is None:
                area = TableCategory(name=area_name)
                db.add(area)
                await db.flush()
            for number, capacity in area_tables:
                exists = (await db.execute(
                    select(DiningTable.id).where(DiningTable.number == number)
                )).first()
                if exists is None:
                    db.add(DiningTable(number=number, capacity=capacity, category_id=area.id))
            logger.info(f"Dining area {area_name} ready")

        await db.commit()

    await engine.dispose()
    logger.info("Seed complete")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the restaurant database")
    parser.add_argument("--admin-email", default="admin@restaurant.com")
    parser.add_argument("--admin-password", default="Admin123!")
    args = parser.parse_args()

    setup_logging()
    asyncio.run(seed(args.admin_email, args.admin_password))


if __name__ == "__main__":
    main()
