"""
opsbot.adapters.supervisor

Per-backend adapter supervisor.

The supervisor owns a single connection child. Protocol handling lives with each
backend; the connection here only tracks lifecycle so the adapter slot in the
supervision tree behaves like any other child.
"""

from __future__ import annotations

from opsbot.observability.logging import get_logger
from opsbot.settings import Settings
from opsbot.supervision.supervisor import OneForOneSupervisor
from opsbot.supervision.worker import ChildSpec, Worker

log = get_logger(__name__)


class AdapterConnection(Worker):
    def __init__(self, adapter: str) -> None:
        super().__init__()
        self.adapter = adapter
        self.name = f"{adapter}_connection"

    async def run(self) -> None:
        log.info("adapter_connected", adapter=self.adapter)
        try:
            await self._stopped.wait()
        finally:
            log.info("adapter_disconnected", adapter=self.adapter)


class AdapterSupervisor(OneForOneSupervisor):
    def __init__(self, adapter: str, settings: Settings) -> None:
        super().__init__(
            [ChildSpec(id="connection", factory=lambda: AdapterConnection(adapter))],
            name=f"{adapter}_adapter_supervisor",
            max_restarts=settings.max_restarts,
            max_seconds=settings.max_restart_seconds,
        )
        self.adapter = adapter
