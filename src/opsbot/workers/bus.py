"""
opsbot.workers.bus

In-process message bus and the worker that drives it.

Responsibilities:
- `MessageBus`: topic subscriptions plus a queue of published messages. It outlives
  any single driver, so queued messages survive a driver restart.
- `BusDriver`: delivers queued messages to subscribers; on stop it keeps draining
  until the queue is empty or its shutdown grace period runs out.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from opsbot.observability.logging import get_logger
from opsbot.supervision.worker import Worker

log = get_logger(__name__)

Handler = Callable[[Any], Awaitable[None]]

DEFAULT_SHUTDOWN_MS = 10000


@dataclass(frozen=True, slots=True)
class Message:
    topic: str
    payload: Any


class MessageBus:
    def __init__(self) -> None:
        self._queue: asyncio.Queue[Message] = asyncio.Queue()
        self._subscribers: defaultdict[str, list[Handler]] = defaultdict(list)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def subscribe(self, topic: str, handler: Handler) -> None:
        self._subscribers[topic].append(handler)

    def unsubscribe(self, topic: str, handler: Handler) -> None:
        handlers = self._subscribers.get(topic, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, topic: str, payload: Any) -> None:
        await self._queue.put(Message(topic=topic, payload=payload))

    async def next_message(self) -> Message:
        return await self._queue.get()

    def next_message_nowait(self) -> Message | None:
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

    async def deliver(self, message: Message) -> None:
        for handler in list(self._subscribers.get(message.topic, ())):
            try:
                await handler(message.payload)
            except Exception:
                # One failing subscriber must not stall delivery to the others.
                log.exception("bus_handler_failed", topic=message.topic)


class BusDriver(Worker):
    name = "bus_driver"

    def __init__(self, bus: MessageBus, *, shutdown_ms: int = DEFAULT_SHUTDOWN_MS) -> None:
        super().__init__()
        self._bus = bus
        self.shutdown_timeout = shutdown_ms / 1000

    async def run(self) -> None:
        stopping = asyncio.ensure_future(self._stopped.wait())
        try:
            while True:
                getter = asyncio.ensure_future(self._bus.next_message())
                done, _ = await asyncio.wait(
                    {getter, stopping}, return_when=asyncio.FIRST_COMPLETED
                )
                if getter in done:
                    await self._bus.deliver(getter.result())
                    continue
                if not getter.cancel():
                    # Completed between wait() returning and the cancel.
                    await self._bus.deliver(getter.result())
                break
        finally:
            stopping.cancel()
        await self._drain()

    async def _drain(self) -> None:
        drained = 0
        while (message := self._bus.next_message_nowait()) is not None:
            await self._bus.deliver(message)
            drained += 1
        log.info("bus_drained", messages=drained)


# --- Module Notes -----------------------------------------------------------
# The supervisor cancels the driver once `shutdown_timeout` elapses, which bounds the
# drain window; anything still queued then stays in `MessageBus`.
