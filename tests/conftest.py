"""
tests.conftest

Shared fixtures.

Responsibilities:
- In-memory SQLite repo with the ORM schema created.
- A session bound to it.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from opsbot.db.init_db import init_db
from opsbot.db.repo import Repo

MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def repo() -> AsyncIterator[Repo]:
    repo = Repo(MEMORY_URL)
    await repo.connect()
    await init_db(repo.engine)
    try:
        yield repo
    finally:
        await repo.dispose()


@pytest_asyncio.fixture
async def session(repo: Repo) -> AsyncIterator[AsyncSession]:
    async with repo.session() as session:
        yield session
