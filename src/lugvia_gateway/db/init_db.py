"""
lugvia_gateway.db.init_db

DB initialization helpers.

Responsibilities:
- Create tables on startup; the schema is a single schemaless document table.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from lugvia_gateway.db import models  # noqa: F401  # register models on Base.metadata
from lugvia_gateway.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    # Use a transactional DDL block when supported by the backend.
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
