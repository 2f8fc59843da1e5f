"""
Seed script -- populates the database with the Casablanca pilot data.

Run after migrations:
    python seed.py

Creates (only if no city exists yet):
  - the ``casablanca`` city (MAD, Africa/Casablanca)
  - the ``petit_taxi_red`` transport mode
  - its METERED pricing profile
  - a handful of named places around the city
"""

import asyncio
import logging

from src.infrastructure.database import async_session_factory, engine
from src.infrastructure.seed_data import seed_reference_data


async def main():
    logging.basicConfig(level=logging.INFO)
    async with async_session_factory() as session:
        seeded = await seed_reference_data(session)
    print("Seed complete!" if seeded else "Database already seeded. Skipping.")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
