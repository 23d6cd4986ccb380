"""
opsbot.__main__

Entrypoint for running the service via `python -m opsbot` (or the `opsbot` script).

Responsibilities:
- Load settings and configure logging before anything else runs.
- Run the bootstrap sequencer, then block until the supervision tree stops.
- Translate SIGINT/SIGTERM into an orderly tree shutdown.
"""

from __future__ import annotations

import asyncio
import signal

from opsbot.bootstrap.sequencer import Bootstrap
from opsbot.observability.logging import configure_logging
from opsbot.settings import Settings, get_settings


async def serve(settings: Settings) -> None:
    bootstrap = Bootstrap(settings)
    await bootstrap.start()

    loop = asyncio.get_running_loop()
    shutdown: set[asyncio.Task[None]] = set()

    def _request_stop() -> None:
        task = loop.create_task(bootstrap.stop())
        shutdown.add(task)
        task.add_done_callback(shutdown.discard)

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _request_stop)

    await bootstrap.wait()


def main() -> None:
    settings = get_settings()
    configure_logging(service_name=settings.service_name, level=settings.log_level)
    asyncio.run(serve(settings))


if __name__ == "__main__":
    main()


# --- Module Notes -----------------------------------------------------------
# In containers this is PID 1 behind a process manager; SIGTERM gives the bus driver
# its drain window before the orchestrator's kill timeout.
