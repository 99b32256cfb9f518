"""
Seed a handful of demo inventory items for an existing user.

Run locally (from backend/):
  python -m scripts.seed_demo_inventory --email demo@example.com [--reset]

It uses the same DATABASE_* env vars as the backend (dotenv supported by core.config).
"""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass

from sqlalchemy import delete, select

from core.units import coerce_amount, price_to_minor
from db.database import async_session_maker, create_db_and_tables
from db.inventory.item import InventoryItem
from db.users import User


@dataclass(frozen=True)
class SeedItem:
    name: str
    category: str
    quantity: float
    unit: str
    min_stock: float
    price: float
    supplier: str


SEED_ITEMS: list[SeedItem] = [
    SeedItem("Tomatoes", "Vegetables", 12.5, "kg", 5, 2.40, "Fresh Farms Co."),
    SeedItem("Olive Oil", "Pantry", 3, "liters", 4, 9.90, "Mediterraneo"),
    SeedItem("Sparkling Water", "Beverages", 48, "bottles", 24, 0.65, "Mixers Ltd."),
    SeedItem("Tuna", "Canned", 6, "cans", 10, 1.85, "Ocean Pantry"),
    SeedItem("Flour", "Baking", 25, "kg", 10, 0.95, "Mill & Grain"),
    SeedItem("Napkins", "Supplies", 2, "boxes", 3, 4.50, "CleanCo"),
]


async def main(email: str, reset: bool) -> None:
    await create_db_and_tables()
    async with async_session_maker() as db:
        res = await db.execute(select(User).where(User.email == email))
        user = res.scalar_one_or_none()
        if not user:
            raise SystemExit(f"No user with email {email!r}; register one via POST /auth/register first.")

        if reset:
            res_del = await db.execute(delete(InventoryItem).where(InventoryItem.user_id == user.id))
            print(f"Deleted inventory_items: {int(getattr(res_del, 'rowcount', 0) or 0)}")

        existing = await db.execute(select(InventoryItem.name).where(InventoryItem.user_id == user.id))
        have = {n.lower() for n in existing.scalars().all()}

        created = 0
        for s in SEED_ITEMS:
            if s.name.lower() in have:
                continue
            db.add(
                InventoryItem(
                    user_id=user.id,
                    name=s.name,
                    category=s.category,
                    quantity=coerce_amount(s.quantity, s.unit),
                    unit=s.unit,
                    min_stock=coerce_amount(s.min_stock, s.unit),
                    price_minor=price_to_minor(s.price),
                    supplier=s.supplier,
                )
            )
            created += 1

        await db.commit()
        print(f"Done. Inventory items created: {created}.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--email", required=True)
    parser.add_argument("--reset", action="store_true", help="delete the user's items first")
    args = parser.parse_args()
    asyncio.run(main(args.email, args.reset))
