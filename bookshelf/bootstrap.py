"""
Bookshelf — Schema Bootstrap
=============================

What:  Ensures the `books` table exists before the server accepts requests.
How:   Emits a single CREATE TABLE IF NOT EXISTS compiled from the Book model,
       so it is safe on every start and against concurrent starts.
When:  Once, from the application lifespan. Any failure propagates and
       aborts startup.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.schema import CreateTable

from bookshelf.models.book import Book

logger = logging.getLogger(__name__)


async def ensure_schema(engine: AsyncEngine) -> None:
    """Create the books table if it is missing."""
    async with engine.begin() as conn:
        await conn.execute(CreateTable(Book.__table__, if_not_exists=True))
    logger.info("Schema ready: table '%s'", Book.__tablename__)
