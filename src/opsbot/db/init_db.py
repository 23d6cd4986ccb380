"""
opsbot.db.init_db

DB initialization helper (dev/test convenience).

Responsibilities:
- Create tables for local development and tests.
- Keep the production migration workflow separate (alembic).
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from opsbot.db import models  # noqa: F401  # registers tables on Base.metadata
from opsbot.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# --- Module Notes -----------------------------------------------------------
# Production deployments run `alembic upgrade head`; the sequencer then refuses to
# start if the applied revision lags the files on disk.
