import asyncio
import sys
from pathlib import Path

"""
Seed demo data (an admin organizer, categories, locations, items) into the DB.

This script can be run from either:
- backend/: `python scripts/seed_demo_data.py`
- repo root: `python backend/scripts/seed_demo_data.py`
"""

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import func, select

from core.lookup import generate_asset_tag
from db.database import async_session_maker, create_db_and_tables
from db.users import User
from db.inventory.category import InventoryCategory
from db.inventory.item import InventoryItem
from db.inventory.location import Location

from fastapi_users.password import PasswordHelper


password_helper = PasswordHelper()


async def get_or_create_user(session, email: str, password: str, first_name: str, last_name: str) -> User:
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        return user

    user = User(
        email=email,
        hashed_password=password_helper.hash(password),
        first_name=first_name,
        last_name=last_name,
        is_active=True,
        is_superuser=True,
        is_verified=True,
    )
    session.add(user)
    await session.flush()
    return user


async def get_or_create_category(session, name: str, description: str | None = None) -> InventoryCategory:
    result = await session.execute(
        select(InventoryCategory).where(func.lower(InventoryCategory.name) == name.strip().lower())
    )
    category = result.scalar_one_or_none()
    if category:
        return category

    category = InventoryCategory(name=name.strip(), description=description)
    session.add(category)
    await session.flush()
    return category


async def get_or_create_location(session, name: str, capacity: int) -> Location:
    result = await session.execute(select(Location).where(func.lower(Location.name) == name.strip().lower()))
    location = result.scalar_one_or_none()
    if location:
        # Keep capacity up-to-date if you re-run seed with new values
        location.capacity = capacity
        await session.flush()
        return location

    location = Location(name=name.strip(), capacity=capacity)
    session.add(location)
    await session.flush()
    return location


async def get_or_create_item(session, category_id: int, name: str, location_id: int, serial_number: str | None = None) -> InventoryItem:
    result = await session.execute(
        select(InventoryItem).where(
            InventoryItem.category_id == category_id,
            func.lower(InventoryItem.name) == name.strip().lower(),
        )
    )
    item = result.scalar_one_or_none()
    if item:
        return item

    item = InventoryItem(
        category_id=category_id,
        name=name.strip(),
        asset_tag=generate_asset_tag(),
        serial_number=serial_number,
        status="active",
        holder_location_id=location_id,
    )
    session.add(item)
    await session.flush()
    return item


async def seed():
    await create_db_and_tables()

    async with async_session_maker() as session:
        await get_or_create_user(session, "admin@example.com", "admin", "Demo", "Admin")

        laptops = await get_or_create_category(session, "Laptops", "Loaner laptops for participants")
        cables = await get_or_create_category(session, "Cables & Adapters")
        hardware = await get_or_create_category(session, "Hardware Kits", "Microcontrollers and sensor kits")

        storage = await get_or_create_location(session, "Storage Room", 200)
        front_desk = await get_or_create_location(session, "Front Desk", 25)

        for i in range(1, 6):
            await get_or_create_item(session, laptops.id, f"Laptop {i:02d}", storage.id, serial_number=f"LT-{1000 + i}")
        for name in ("HDMI Cable", "USB-C Hub", "Ethernet Adapter"):
            await get_or_create_item(session, cables.id, name, front_desk.id)
        for name in ("Arduino Kit", "Raspberry Pi Kit"):
            await get_or_create_item(session, hardware.id, name, storage.id)

        await session.commit()


if __name__ == "__main__":
    asyncio.run(seed())
