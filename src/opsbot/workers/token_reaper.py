"""
opsbot.workers.token_reaper

Periodic deletion of expired API tokens.
"""

from __future__ import annotations

from opsbot.db.repo import Repo
from opsbot.db.repositories.tokens import TokenRepo
from opsbot.observability.logging import get_logger
from opsbot.supervision.worker import PeriodicWorker

log = get_logger(__name__)


class TokenReaper(PeriodicWorker):
    name = "token_reaper"

    def __init__(self, repo: Repo, *, interval: float = 60.0) -> None:
        super().__init__()
        self._repo = repo
        self.interval = interval

    async def tick(self) -> None:
        async with self._repo.session() as session:
            reaped = await TokenRepo(session).delete_expired()
            await session.commit()
        if reaped:
            log.info("tokens_reaped", count=reaped)
