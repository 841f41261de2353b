"""Seed script to populate the fixed category table."""

import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventscape.database import AsyncSessionLocal
from eventscape.models.category import CATEGORIES, Category


async def seed_categories(session: AsyncSession) -> int:
    """Insert missing categories and fix renamed ones. Returns the number of changes."""
    result = await session.execute(select(Category))
    existing = {category.id: category for category in result.scalars().all()}

    changes = 0
    for category_id, name in CATEGORIES.items():
        category = existing.get(category_id)
        if category is None:
            session.add(Category(id=category_id, name=name))
            print(f"Added category {category_id}: {name}")
            changes += 1
        elif category.name != name:
            print(f"Renamed category {category_id}: {category.name} -> {name}")
            category.name = name
            changes += 1

    return changes


async def main() -> None:
    async with AsyncSessionLocal() as session:
        changes = await seed_categories(session)
        await session.commit()
    print(f"Category seeding complete ({changes} changes)")


if __name__ == "__main__":
    asyncio.run(main())
