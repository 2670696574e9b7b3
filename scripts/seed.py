"""
Demo Data Seeder

Creates a few Sydney cafes with owner accounts, menus and items directly
in the configured database.
Run from project root: python scripts/seed.py
"""

import asyncio
import os
import sys
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from caffio.core.config import get_settings, setup_logging
from caffio.core.security import hash_password
from caffio.database import async_session_maker, engine, init_db
from caffio.models import Cafe, Menu, MenuItem, User
from caffio.services.availability import default_business_hours

DEMO_PASSWORD = "caffio123"

CAFES = [
    {
        "name": "Reservoir Roasters",
        "address": "Reservoir St, Surry Hills NSW 2010",
        "lat": -33.8825,
        "lon": 151.2094,
        "owner": "owner@reservoir.example.com",
        "primary_color": "#6F4E37",
    },
    {
        "name": "Harbour Bean",
        "address": "Circular Quay, Sydney NSW 2000",
        "lat": -33.8611,
        "lon": 151.2111,
        "owner": "owner@harbourbean.example.com",
        "primary_color": "#1D3557",
    },
    {
        "name": "Newtown Grind",
        "address": "King St, Newtown NSW 2042",
        "lat": -33.8970,
        "lon": 151.1793,
        "owner": "owner@newtowngrind.example.com",
        "primary_color": "#2A9D8F",
    },
]

MENU_ITEMS = [
    {"name": "Flat White", "price": "5.30", "category": "Coffee"},
    {"name": "Long Black", "price": "4.80", "category": "Coffee"},
    {"name": "Cappuccino", "price": "5.50", "category": "Coffee"},
    {"name": "Chai Latte", "price": "5.80", "category": "Tea"},
    {"name": "Banana Bread", "price": "6.50", "category": "Food"},
]

COFFEE_CUSTOMIZATIONS = {
    "size": {"options": ["small", "regular", "large"], "default": "regular"},
    "milk": {"options": ["full cream", "skim", "oat", "almond"], "default": "full cream"},
}


async def seed() -> None:
    settings = get_settings()
    await init_db()

    async with async_session_maker() as db:
        created = 0
        for entry in CAFES:
            existing = await db.execute(select(User.id).where(User.email == entry["owner"]))
            if existing.scalar_one_or_none() is not None:
                print(f"   ⏭️  {entry['name']} already seeded")
                continue

            cafe = Cafe(
                name=entry["name"],
                address=entry["address"],
                lat=entry["lat"],
                lon=entry["lon"],
                primary_color=entry["primary_color"],
                business_hours=default_business_hours(
                    settings.default_open_time,
                    settings.default_close_time,
                ),
            )
            menu = Menu(cafe=cafe, name="Main")
            for item in MENU_ITEMS:
                menu.items.append(
                    MenuItem(
                        name=item["name"],
                        price=Decimal(item["price"]),
                        currency=settings.default_currency,
                        category=item["category"],
                        customizations=COFFEE_CUSTOMIZATIONS if item["category"] == "Coffee" else None,
                    )
                )
            db.add_all([
                cafe,
                menu,
                User(email=entry["owner"], password_hash=hash_password(DEMO_PASSWORD), cafe=cafe),
            ])
            created += 1
            print(f"   ✅ {entry['name']} ({entry['owner']})")

        await db.commit()

    await engine.dispose()
    print(f"\nSeeded {created} cafe(s). Owner password: {DEMO_PASSWORD}")


if __name__ == "__main__":
    setup_logging()
    print("=" * 60)
    print("☕ SEEDING DEMO CAFES")
    print("=" * 60)
    asyncio.run(seed())
