"""
Database Seed Script

Creates the tables and inserts the demo restaurant with its menu and
WhatsApp route, so staging/production mode has something to talk to.
Run from project root: python scripts/seed.py

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import sys
import argparse

from sqlalchemy import select

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from app.core.config import setup_logging
from app.database import async_session_maker, close_db, init_db
from app.models import MenuCategory, MenuItem, Restaurant, RestaurantRoute
from app.services.catalog.mock import DEMO_MENU, DEMO_RESTAURANT_ID
from app.services.routing.base import normalize_address
from app.services.routing.mock import DEMO_RESTAURANTS


async def seed(address: str) -> None:
    await init_db()

    async with async_session_maker() as db:
        existing = await db.get(Restaurant, DEMO_RESTAURANT_ID)
        if existing is not None:
            print(f"⚠️  {existing.name} already seeded, skipping menu")
        else:
            restaurant = Restaurant(
                id=DEMO_RESTAURANT_ID,
                name=DEMO_RESTAURANTS[DEMO_RESTAURANT_ID],
            )
            for position, category in enumerate(DEMO_MENU):
                row = MenuCategory(name=category.category, position=position)
                row.items = [
                    MenuItem(name=item.name, price=item.price, position=i)
                    for i, item in enumerate(category.items)
                ]
                restaurant.categories.append(row)
            db.add(restaurant)
            print(f"✅ Seeded {restaurant.name} ({len(DEMO_MENU)} categories)")

        address = normalize_address(address)
        result = await db.execute(
            select(RestaurantRoute).where(RestaurantRoute.address == address)
        )
        if result.scalar_one_or_none() is None:
            db.add(RestaurantRoute(address=address, restaurant_id=DEMO_RESTAURANT_ID))
            print(f"✅ Routed {address} -> {DEMO_RESTAURANT_ID}")

        await db.commit()

    await close_db()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the demo restaurant")
    parser.add_argument(
        "--address",
        default="whatsapp:+14155238886",
        help="WhatsApp number customers write to",
    )
    args = parser.parse_args()

    setup_logging()
    asyncio.run(seed(args.address))
