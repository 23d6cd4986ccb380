"""
opsbot.bootstrap.children

Ordered child list for the root supervisor.

Responsibilities:
- Hold the shared handles children are built from (`Collaborators`).
- Produce the children in dependency order: persistence first, endpoint last.
- Collapse to persistence, token reaper, and endpoint when chat is disabled in dev.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial

from opsbot.db.repo import Repo
from opsbot.settings import Settings
from opsbot.supervision.worker import ChildSpec, Worker
from opsbot.workers.bus import BusDriver, MessageBus
from opsbot.workers.credentials import CredentialManager
from opsbot.workers.endpoint import EndpointWorker
from opsbot.workers.repo import RepoWorker
from opsbot.workers.supervisors import CommandSupervisor, RelaySupervisor
from opsbot.workers.template_cache import TemplateCache
from opsbot.workers.token_reaper import TokenReaper


@dataclass(frozen=True)
class Collaborators:
    settings: Settings
    repo: Repo
    bus: MessageBus = field(default_factory=MessageBus)


def build_children(
    env: str,
    nochat: bool,
    adapter_supervisor: Callable[[], Worker],
    *,
    deps: Collaborators,
) -> list[ChildSpec]:
    settings = deps.settings
    repo = ChildSpec(id="repo", factory=partial(RepoWorker, deps.repo))
    token_reaper = ChildSpec(
        id="token_reaper",
        factory=partial(TokenReaper, deps.repo, interval=settings.token_reap_interval),
    )
    endpoint = ChildSpec(
        id="endpoint", factory=partial(EndpointWorker, settings, deps.repo)
    )

    if env == "dev" and nochat:
        return [repo, token_reaper, endpoint]

    return [
        repo,
        ChildSpec(
            id="bus_driver",
            factory=partial(BusDriver, deps.bus, shutdown_ms=settings.bus_shutdown_ms),
            shutdown_ms=settings.bus_shutdown_ms,
        ),
        token_reaper,
        ChildSpec(id="template_cache", factory=partial(TemplateCache, ttl=settings.template_ttl)),
        ChildSpec(id="credential_manager", factory=partial(CredentialManager, settings)),
        ChildSpec(
            id="relay_supervisor", kind="supervisor", factory=partial(RelaySupervisor, settings)
        ),
        ChildSpec(
            id="command_supervisor",
            kind="supervisor",
            factory=partial(CommandSupervisor, settings),
        ),
        ChildSpec(id="adapter_supervisor", kind="supervisor", factory=adapter_supervisor),
        endpoint,
    ]


# --- Module Notes -----------------------------------------------------------
# Order matters: the supervisor starts children front to back and stops them back to
# front, so everything after `repo` can rely on a connected database.
