"""Script to initialize the database."""

import asyncio

from users_service.database import engine
from users_service.models import metadata


async def init_db() -> None:
    """Initialize the database by creating the users table."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    await engine.dispose()
    print("✓ Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(init_db())
