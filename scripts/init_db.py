#!/usr/bin/env python3
"""
Create tables and seed default categories.
Run from the project root: python -m scripts.init_db
"""
import asyncio

from herstories.core.logging import configure_logging
from herstories.db.seed import seed_categories
from herstories.db.session import SessionLocal, create_all, engine


async def main():
    configure_logging()
    await create_all()
    async with SessionLocal() as db:
        added = await seed_categories(db)
    await engine.dispose()
    print(f"Database ready, {added} categories added.")


if __name__ == "__main__":
    asyncio.run(main())
