"""Database initialization script for chat history tables."""

import asyncio
import logging

from app.services.memory.db import engine
from app.services.memory.models import Base

logger = logging.getLogger(__name__)


async def init_database() -> bool:
    """Initialize database tables if they don't exist."""
    try:
        logger.info(f"Initializing database at {engine.url}")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")
        return True
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        return False


if __name__ == "__main__":
    asyncio.run(init_database())
