"""
opsbot.db.repo

Process-wide database handle.

Responsibilities:
- Own the async engine and session factory while the repo worker is running.
- Give dependents (health endpoint, token reaper, bootstrap migration check) one
  stable object to hold, independent of how often the repo worker restarts.
"""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from opsbot.db.session import create_engine, create_sessionmaker


class RepoNotConnected(RuntimeError):
    pass


class Repo:
    def __init__(self, database_url: str) -> None:
        self.database_url = database_url
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RepoNotConnected("repo is not connected")
        return self._engine

    @property
    def sessionmaker(self) -> async_sessionmaker[AsyncSession]:
        if self._sessionmaker is None:
            raise RepoNotConnected("repo is not connected")
        return self._sessionmaker

    def session(self) -> AsyncSession:
        return self.sessionmaker()

    async def connect(self) -> None:
        if self._engine is not None:
            return
        engine = create_engine(self.database_url)
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception:
            await engine.dispose()
            raise
        self._engine = engine
        self._sessionmaker = create_sessionmaker(engine)

    async def dispose(self) -> None:
        engine, self._engine, self._sessionmaker = self._engine, None, None
        if engine is not None:
            await engine.dispose()


# --- Module Notes -----------------------------------------------------------
# `connect` probes the database so a bad URL fails the repo worker's start, which in
# turn fails bootstrap before anything else is started.
