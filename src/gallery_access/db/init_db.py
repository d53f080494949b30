"""
gallery_access.db.init_db

DB initialization helpers (dev/test convenience).

Responsibilities:
- Create the profile table for local development and tests.
- Keep production provisioning separate (Alembic).
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from gallery_access.db import models  # noqa: F401  # registers tables on Base.metadata
from gallery_access.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    """
    Create tables if they don't exist.

    Not used in prod: there, a missing table surfaces as "profile store not
    found" and sign-in keeps working until the migration is applied.
    """

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
