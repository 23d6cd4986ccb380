"""
opsbot.workers.repo

Persistence worker; always the first child started.
"""

from __future__ import annotations

from opsbot.db.repo import Repo
from opsbot.observability.logging import get_logger
from opsbot.supervision.worker import Worker

log = get_logger(__name__)


class RepoWorker(Worker):
    name = "repo"

    def __init__(self, repo: Repo) -> None:
        super().__init__()
        self._repo = repo

    async def start(self) -> None:
        await self._repo.connect()
        log.info("repo_connected")

    async def run(self) -> None:
        try:
            await self._stopped.wait()
        finally:
            await self._repo.dispose()
            log.info("repo_disposed")
