"""
opsbot.bootstrap.sequencer

Process bootstrap sequencer.

Responsibilities:
- Run the startup sequence exactly once: capabilities → adapter → child list →
  supervision tree → schema migration check.
- Log every check at the level matching its outcome.
- Abort the process on any failed check; tolerate migration drift only in dev.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Sequence
from functools import partial

from opsbot.adapters.registry import AdapterRegistry, ChatAdapter, default_registry
from opsbot.bootstrap.capabilities import CheckResult, verify_dirty_workers, verify_parallelism
from opsbot.bootstrap.children import Collaborators, build_children
from opsbot.bootstrap.errors import (
    BootstrapError,
    CapabilityError,
    ConfigurationError,
    MigrationDriftError,
    SupervisionStartError,
)
from opsbot.bootstrap.migrations import check_schema_migration
from opsbot.db.repo import Repo
from opsbot.observability.logging import flush_logs, get_logger
from opsbot.settings import Settings
from opsbot.supervision.supervisor import OneForOneSupervisor, RestartIntensityExceeded
from opsbot.supervision.worker import Worker

log = get_logger(__name__)

CapabilityCheck = Callable[[], CheckResult]

DEFAULT_CAPABILITY_CHECKS: tuple[CapabilityCheck, ...] = (verify_parallelism, verify_dirty_workers)


class BootState(enum.StrEnum):
    not_started = "NOT_STARTED"
    capabilities_verified = "CAPABILITIES_VERIFIED"
    adapter_resolved = "ADAPTER_RESOLVED"
    tree_built = "TREE_BUILT"
    started = "STARTED"
    migration_verified = "MIGRATION_VERIFIED"
    running = "RUNNING"
    aborted = "ABORTED"


def log_result(result: CheckResult) -> None:
    if result.status == "ok":
        log.info(result.message)
    elif result.status == "error":
        log.error(result.message)
    else:
        log.warning(result.message)


class Bootstrap:
    """
    One instance per process. `start()` may be called once; the instance then either
    reaches `RUNNING` or aborts the process.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        registry: AdapterRegistry | None = None,
        capability_checks: Sequence[CapabilityCheck] = DEFAULT_CAPABILITY_CHECKS,
        repo: Repo | None = None,
    ) -> None:
        self.settings = settings
        self.registry = registry or default_registry()
        self.capability_checks = tuple(capability_checks)
        self.deps = Collaborators(settings=settings, repo=repo or Repo(settings.database_url))
        self.state = BootState.not_started
        self.supervisor: OneForOneSupervisor | None = None

    # -- steps -------------------------------------------------------------------

    def verify_runtime_capabilities(self) -> None:
        results = [check() for check in self.capability_checks]
        for result in results:
            log_result(result)
        failures = [result.message for result in results if result.failed]
        if failures:
            raise CapabilityError("\n".join(failures))
        self.state = BootState.capabilities_verified

    def resolve_adapter(self, name: str) -> Callable[[], Worker]:
        log.info(f"Using {name} chat adapter")
        try:
            adapter = ChatAdapter.parse(name)
        except ConfigurationError as exc:
            raise ConfigurationError(
                f"Please configure a chat adapter before starting opsbot. {exc}"
            ) from None
        factory = self.registry.supervisor_for(adapter)
        self.state = BootState.adapter_resolved
        return partial(factory, self.settings)

    def build_children(self, adapter_supervisor: Callable[[], Worker]):
        children = build_children(
            self.settings.env,
            self.settings.chat_disabled,
            adapter_supervisor,
            deps=self.deps,
        )
        self.state = BootState.tree_built
        return children

    async def verify_schema_migration(self) -> CheckResult:
        try:
            result, file_v, database_v = await check_schema_migration(
                self.deps.repo.engine,
                migrations_path=self.settings.migrations_path,
                schema=self.settings.migration_schema,
                env=self.settings.env,
            )
        except FileNotFoundError:
            result = CheckResult(
                "error", f"Migration directory {self.settings.migrations_path} was not found."
            )
            file_v = database_v = 0
        log_result(result)
        if result.failed:
            raise MigrationDriftError(
                result.message, file_version=file_v, database_version=database_v
            )
        self.state = BootState.migration_verified
        return result

    # -- lifecycle ---------------------------------------------------------------

    async def start(self) -> OneForOneSupervisor:
        if self.state is not BootState.not_started:
            raise RuntimeError(f"bootstrap already ran (state={self.state})")

        try:
            self.verify_runtime_capabilities()
            adapter_supervisor = self.resolve_adapter(self.settings.adapter)
            children = self.build_children(adapter_supervisor)

            self.supervisor = OneForOneSupervisor(
                children,
                name="root",
                max_restarts=self.settings.max_restarts,
                max_seconds=self.settings.max_restart_seconds,
            )
            try:
                await self.supervisor.start()
            except Exception as exc:
                raise SupervisionStartError(f"supervision tree failed to start: {exc!r}") from exc
            self.state = BootState.started

            await self.verify_schema_migration()
        except BootstrapError as exc:
            await self.abort(exc)

        self.state = BootState.running
        log.info("running", env=self.settings.env, children=self.supervisor.child_ids())
        return self.supervisor

    async def wait(self) -> None:
        """Block until the tree stops; a failed root supervisor is fatal."""
        if self.supervisor is None:
            raise RuntimeError("bootstrap not started")
        try:
            await self.supervisor.run()
        except RestartIntensityExceeded as exc:
            log.critical("supervision_failed", error=str(exc))
            flush_logs()
            raise SystemExit(1) from exc

    async def stop(self) -> None:
        if self.supervisor is not None:
            await self.supervisor.stop()

    async def abort(self, reason: BaseException | None = None) -> None:
        self.state = BootState.aborted
        if self.supervisor is not None:
            await self.supervisor.stop()
        log.critical(
            "Application start aborted.",
            reason=str(reason) if reason else None,
            error_type=type(reason).__name__ if reason else None,
        )
        flush_logs()
        raise SystemExit(1)


# --- Module Notes -----------------------------------------------------------
# `abort` raises SystemExit rather than calling os._exit so started children get a
# chance to stop and pending log output is flushed first.
