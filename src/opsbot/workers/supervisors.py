"""
opsbot.workers.supervisors

Nested supervisors for relays and command executors.

Both start empty; relay connections and running commands are attached at runtime
and restarted independently of each other.
"""

from __future__ import annotations

from collections.abc import Callable

from opsbot.settings import Settings
from opsbot.supervision.supervisor import OneForOneSupervisor
from opsbot.supervision.worker import ChildSpec, Worker


class RelaySupervisor(OneForOneSupervisor):
    def __init__(self, settings: Settings) -> None:
        super().__init__(
            name="relay_supervisor",
            max_restarts=settings.max_restarts,
            max_seconds=settings.max_restart_seconds,
        )

    async def attach_relay(self, relay_id: str, factory: Callable[[], Worker]) -> Worker:
        return await self.start_child(ChildSpec(id=f"relay:{relay_id}", factory=factory))

    async def detach_relay(self, relay_id: str) -> None:
        await self.terminate_child(f"relay:{relay_id}")


class CommandSupervisor(OneForOneSupervisor):
    def __init__(self, settings: Settings) -> None:
        super().__init__(
            name="command_supervisor",
            max_restarts=settings.max_restarts,
            max_seconds=settings.max_restart_seconds,
        )

    async def attach_command(self, invocation_id: str, factory: Callable[[], Worker]) -> Worker:
        return await self.start_child(ChildSpec(id=f"command:{invocation_id}", factory=factory))
