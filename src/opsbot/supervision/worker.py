"""
opsbot.supervision.worker

Worker lifecycle contract.

Responsibilities:
- `Worker`: `start()` prepares resources, `run()` does the long-running work,
  `stop()` asks it to finish.
- `PeriodicWorker`: runs `tick()` on a fixed interval until stopped.
- `ChildSpec`: how a supervisor builds (and rebuilds) a child.
"""

from __future__ import annotations

import abc
import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal


class Worker(abc.ABC):
    name: str = "worker"
    # Seconds a supervisor waits after `stop()` before cancelling `run()`.
    shutdown_timeout: float = 5.0

    def __init__(self) -> None:
        self._stopped = asyncio.Event()

    @property
    def stopping(self) -> bool:
        return self._stopped.is_set()

    async def start(self) -> None:
        """Acquire resources. Raising here fails the (re)start of this child."""

    async def run(self) -> None:
        # Default: idle until asked to stop.
        await self._stopped.wait()

    async def stop(self) -> None:
        self._stopped.set()


class PeriodicWorker(Worker):
    interval: float = 60.0

    @abc.abstractmethod
    async def tick(self) -> None: ...

    async def run(self) -> None:
        while not self.stopping:
            await self.tick()
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                continue


@dataclass(frozen=True, slots=True)
class ChildSpec:
    """
    `factory` is called for the initial start and again for every restart, so each
    run gets a fresh worker.
    """

    id: str
    factory: Callable[[], Worker]
    # Supervisors get unlimited shutdown time unless `shutdown_ms` says otherwise.
    kind: Literal["worker", "supervisor"] = "worker"
    # Overrides the worker's own `shutdown_timeout` when set.
    shutdown_ms: int | None = None


# --- Module Notes -----------------------------------------------------------
# Supervisors are workers too, which is what lets relay/command supervisors nest
# under the root supervisor.
