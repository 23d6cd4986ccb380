"""
opsbot.supervision.supervisor

One-for-one supervisor on top of asyncio tasks.

Responsibilities:
- Start children in order, each in its own task.
- Restart only the child whose `run()` raised, with a fresh instance.
- Bound restarts (`max_restarts` within `max_seconds`); past that, stop every child
  and fail with `RestartIntensityExceeded`.
- Stop children in reverse start order, honouring each one's shutdown grace period.
"""

from __future__ import annotations

import asyncio
import time
from collections import Counter, deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import partial

from opsbot.observability.logging import get_logger
from opsbot.supervision.worker import ChildSpec, Worker

log = get_logger(__name__)


class RestartIntensityExceeded(RuntimeError):
    def __init__(self, supervisor: str, child: str, max_restarts: int, max_seconds: float) -> None:
        self.supervisor = supervisor
        self.child = child
        super().__init__(
            f"{supervisor}: child {child!r} exceeded {max_restarts} restarts in {max_seconds}s"
        )


@dataclass(slots=True)
class _Child:
    spec: ChildSpec
    worker: Worker
    task: asyncio.Task[None]


class OneForOneSupervisor(Worker):
    """
    Children returning normally from `run()` are considered finished and are not
    restarted; only an exception triggers a restart.
    """

    def __init__(
        self,
        children: Sequence[ChildSpec] = (),
        *,
        name: str = "supervisor",
        max_restarts: int = 3,
        max_seconds: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self.name = name
        self.max_restarts = max_restarts
        self.max_seconds = max_seconds
        self.restart_counts: Counter[str] = Counter()

        self._specs: list[ChildSpec] = []
        self._children: dict[str, _Child] = {}
        self._restart_log: deque[float] = deque()
        # Restarts scheduled but not yet finished, by child id.
        self._restarts: dict[str, asyncio.Task[None]] = {}
        self._clock = clock
        self._exit: asyncio.Future[None] | None = None
        self._started = False
        self._stopping = False

        for spec in children:
            self._add_spec(spec)

    # -- lifecycle ---------------------------------------------------------------

    async def start(self) -> None:
        if self._started:
            raise RuntimeError(f"{self.name} already started")
        self._started = True
        self._exit = asyncio.get_running_loop().create_future()

        for spec in list(self._specs):
            try:
                await self._launch(spec)
            except Exception:
                log.error("child_start_failed", supervisor=self.name, child=spec.id)
                await self.stop()
                raise
        log.info("supervisor_started", supervisor=self.name, children=self.child_ids())

    async def run(self) -> None:
        if not self._started:
            await self.start()
        assert self._exit is not None
        await self._exit

    async def stop(self) -> None:
        if self._stopping:
            return
        self._stopping = True
        await super().stop()

        for task in list(self._restarts.values()):
            task.cancel()
        await self._stop_children()

        if self._exit is not None and not self._exit.done():
            self._exit.set_result(None)
        log.info("supervisor_stopped", supervisor=self.name)

    # -- dynamic children --------------------------------------------------------

    async def start_child(self, spec: ChildSpec) -> Worker:
        if not self._started or self._stopping:
            raise RuntimeError(f"{self.name} is not running")
        self._add_spec(spec)
        try:
            return await self._launch(spec)
        except Exception:
            # Leave the id free so the caller can attach it again.
            self._specs.remove(spec)
            raise

    async def terminate_child(self, child_id: str) -> None:
        self._specs = [spec for spec in self._specs if spec.id != child_id]
        restart = self._restarts.pop(child_id, None)
        if restart is not None:
            restart.cancel()
        child = self._children.pop(child_id, None)
        if child is not None:
            await self._terminate(child)

    def child_ids(self) -> list[str]:
        return [spec.id for spec in self._specs if spec.id in self._children]

    def worker(self, child_id: str) -> Worker | None:
        child = self._children.get(child_id)
        return child.worker if child else None

    # -- internals ---------------------------------------------------------------

    def _add_spec(self, spec: ChildSpec) -> None:
        if any(existing.id == spec.id for existing in self._specs):
            raise ValueError(f"duplicate child id {spec.id!r} in {self.name}")
        self._specs.append(spec)

    async def _launch(self, spec: ChildSpec) -> Worker:
        worker = spec.factory()
        await worker.start()
        task = asyncio.create_task(worker.run(), name=f"{self.name}:{spec.id}")
        child = _Child(spec=spec, worker=worker, task=task)
        self._children[spec.id] = child
        task.add_done_callback(partial(self._child_exited, child))
        return worker

    def _child_exited(self, child: _Child, task: asyncio.Task[None]) -> None:
        if self._stopping or self._children.get(child.spec.id) is not child:
            return
        del self._children[child.spec.id]

        if task.cancelled():
            log.warning("child_cancelled", supervisor=self.name, child=child.spec.id)
            return
        error = task.exception()
        if error is None:
            log.info("child_exited", supervisor=self.name, child=child.spec.id)
            return

        log.error(
            "child_crashed",
            supervisor=self.name,
            child=child.spec.id,
            error=repr(error),
        )
        restart = asyncio.create_task(self._restart(child.spec))
        self._restarts[child.spec.id] = restart
        restart.add_done_callback(partial(self._restart_done, child.spec.id))

    def _restart_done(self, child_id: str, task: asyncio.Task[None]) -> None:
        if self._restarts.get(child_id) is task:
            del self._restarts[child_id]

    async def _restart(self, spec: ChildSpec) -> None:
        # A child terminated while crashed must not come back.
        while not self._stopping and spec in self._specs:
            if not self._allow_restart():
                await self._fail(
                    RestartIntensityExceeded(
                        self.name, spec.id, self.max_restarts, self.max_seconds
                    )
                )
                return
            try:
                await self._launch(spec)
            except Exception as exc:
                log.error(
                    "child_restart_failed", supervisor=self.name, child=spec.id, error=repr(exc)
                )
                continue
            self.restart_counts[spec.id] += 1
            log.warning(
                "child_restarted",
                supervisor=self.name,
                child=spec.id,
                restarts=self.restart_counts[spec.id],
            )
            return

    def _allow_restart(self) -> bool:
        now = self._clock()
        self._restart_log.append(now)
        while self._restart_log and now - self._restart_log[0] > self.max_seconds:
            self._restart_log.popleft()
        return len(self._restart_log) <= self.max_restarts

    async def _fail(self, error: RestartIntensityExceeded) -> None:
        log.critical("supervisor_failed", supervisor=self.name, error=str(error))
        self._stopping = True
        self._stopped.set()
        await self._stop_children()
        if self._exit is not None and not self._exit.done():
            self._exit.set_exception(error)

    async def _stop_children(self) -> None:
        order = [spec.id for spec in reversed(self._specs)]
        order += [cid for cid in reversed(list(self._children)) if cid not in order]
        for child_id in order:
            child = self._children.pop(child_id, None)
            if child is not None:
                await self._terminate(child)

    async def _terminate(self, child: _Child) -> None:
        if child.spec.shutdown_ms is not None:
            timeout = child.spec.shutdown_ms / 1000
        elif child.spec.kind == "supervisor":
            # A nested supervisor bounds each of its own children; wait for the subtree.
            timeout = float("inf")
        else:
            timeout = child.worker.shutdown_timeout
        await child.worker.stop()
        _, pending = await asyncio.wait({child.task}, timeout=_finite(timeout))
        if pending:
            log.warning("child_killed", supervisor=self.name, child=child.spec.id, after=timeout)
            child.task.cancel()
            await asyncio.wait({child.task})
        elif not child.task.cancelled() and child.task.exception() is not None:
            log.warning(
                "child_stop_error",
                supervisor=self.name,
                child=child.spec.id,
                error=repr(child.task.exception()),
            )


def _finite(timeout: float) -> float | None:
    # asyncio.wait takes None, not inf, for "no limit".
    return None if timeout == float("inf") else timeout


# --- Module Notes -----------------------------------------------------------
# Restart intensity mirrors the classic "max 3 restarts in 5 seconds" default; the
# bootstrap sequencer treats a failed root supervisor as fatal for the process.
