"""
opsbot.workers.endpoint

Public endpoint worker; always the last child started.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator

import uvicorn

from opsbot.api.app import create_app
from opsbot.db.repo import Repo
from opsbot.observability.logging import get_logger
from opsbot.settings import Settings
from opsbot.supervision.worker import Worker

log = get_logger(__name__)


class _Server(uvicorn.Server):
    # SIGINT/SIGTERM belong to the process entrypoint, which stops the whole tree.
    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


class EndpointWorker(Worker):
    name = "endpoint"
    shutdown_timeout = 10.0

    def __init__(self, settings: Settings, repo: Repo) -> None:
        super().__init__()
        self._settings = settings
        self._repo = repo
        self._server: uvicorn.Server | None = None

    async def start(self) -> None:
        app = create_app(settings=self._settings, repo=self._repo)
        config = uvicorn.Config(
            app,
            host=self._settings.api_host,
            port=self._settings.api_port,
            log_config=None,  # structlog
            lifespan="off",
        )
        self._server = _Server(config)

    async def run(self) -> None:
        assert self._server is not None
        log.info("endpoint_listening", host=self._settings.api_host, port=self._settings.api_port)
        await self._server.serve()

    async def stop(self) -> None:
        await super().stop()
        if self._server is not None:
            self._server.should_exit = True
