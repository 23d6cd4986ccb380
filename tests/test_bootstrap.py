"""
tests.test_bootstrap

Startup sequencing: capability checks, adapter resolution, the child list, and the
migration drift gate.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import text

from opsbot.adapters.registry import AdapterRegistry, ChatAdapter, default_registry
from opsbot.bootstrap.capabilities import CheckResult, verify_dirty_workers, verify_parallelism
from opsbot.bootstrap.children import Collaborators, build_children
from opsbot.bootstrap.errors import ConfigurationError
from opsbot.bootstrap.sequencer import Bootstrap, BootState
from opsbot.db.repo import Repo
from opsbot.settings import Settings
from opsbot.supervision import ChildSpec, OneForOneSupervisor, Worker

MEMORY_URL = "sqlite+aiosqlite:///:memory:"

FULL_TREE = [
    "repo",
    "bus_driver",
    "token_reaper",
    "template_cache",
    "credential_manager",
    "relay_supervisor",
    "command_supervisor",
    "adapter_supervisor",
    "endpoint",
]

PASSING_CHECKS = (lambda: CheckResult("ok", "fine"),)


class Idle(Worker):
    pass


def make_settings(tmp_path: Path, *, latest: int = 2, **overrides) -> Settings:
    versions = tmp_path / "versions"
    versions.mkdir(exist_ok=True)
    for n in range(1, latest + 1):
        (versions / f"{n:04d}_step.py").write_text("")
    values = {
        "env": "test",
        "adapter": "null",
        "api_host": "127.0.0.1",
        "api_port": 0,
        "database_url": MEMORY_URL,
        "migrations_path": versions,
    }
    values.update(overrides)
    return Settings(**values)


async def stamp(repo: Repo, revision: str) -> None:
    async with repo.engine.begin() as conn:
        await conn.execute(
            text("CREATE TABLE alembic_version (version_num VARCHAR(32) NOT NULL PRIMARY KEY)")
        )
        await conn.execute(
            text("INSERT INTO alembic_version (version_num) VALUES (:v)"), {"v": revision}
        )


# -- adapters --------------------------------------------------------------------


@pytest.mark.parametrize(("raw", "expected"), [("Slack", ChatAdapter.slack), ("IRC", ChatAdapter.irc)])
def test_adapter_names_are_case_insensitive(raw: str, expected: ChatAdapter) -> None:
    assert ChatAdapter.parse(raw) is expected


def test_adapter_names_are_not_trimmed() -> None:
    with pytest.raises(ConfigurationError):
        ChatAdapter.parse(" irc ")


def test_unknown_adapter_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        ChatAdapter.parse("carrier-pigeon")

    assert str(excinfo.value) == (
        "The adapter is set to 'carrier-pigeon', but I don't know what that is. "
        "Try 'slack' or 'hipchat' instead."
    )


def test_unregistered_adapter_is_a_configuration_error() -> None:
    registry = default_registry()
    registry.unregister(ChatAdapter.slack)

    assert ChatAdapter.slack not in registry.registered()
    with pytest.raises(ConfigurationError, match="slack_adapter_supervisor was not found"):
        registry.supervisor_for(ChatAdapter.slack)


def test_resolve_adapter_explains_misconfiguration(tmp_path: Path) -> None:
    bootstrap = Bootstrap(make_settings(tmp_path), repo=Repo(MEMORY_URL))

    with pytest.raises(ConfigurationError, match="^Please configure a chat adapter"):
        bootstrap.resolve_adapter("carrier-pigeon")

    factory = bootstrap.resolve_adapter("TEST")
    assert bootstrap.state is BootState.adapter_resolved
    assert factory().name == "test_adapter_supervisor"


def test_resolve_adapter_without_supervisor(tmp_path: Path) -> None:
    bootstrap = Bootstrap(make_settings(tmp_path), registry=AdapterRegistry(), repo=Repo(MEMORY_URL))

    with pytest.raises(ConfigurationError, match="Please define a supervisor for the null adapter"):
        bootstrap.resolve_adapter("null")


# -- child list ------------------------------------------------------------------


@pytest.mark.parametrize(
    ("env", "nochat", "expected"),
    [
        ("prod", False, FULL_TREE),
        ("dev", False, FULL_TREE),
        ("dev", True, ["repo", "token_reaper", "endpoint"]),
        # nochat is only honoured in dev.
        ("prod", True, FULL_TREE),
    ],
)
def test_child_order(tmp_path: Path, env: str, nochat: bool, expected: list[str]) -> None:
    deps = Collaborators(settings=make_settings(tmp_path), repo=Repo(MEMORY_URL))

    children = build_children(env, nochat, Idle, deps=deps)

    assert [spec.id for spec in children] == expected


def test_nested_supervisors_are_marked_as_such(tmp_path: Path) -> None:
    deps = Collaborators(settings=make_settings(tmp_path), repo=Repo(MEMORY_URL))

    kinds = {spec.id: spec.kind for spec in build_children("prod", False, Idle, deps=deps)}

    assert {cid for cid, kind in kinds.items() if kind == "supervisor"} == {
        "relay_supervisor",
        "command_supervisor",
        "adapter_supervisor",
    }


def test_bus_driver_gets_configured_grace_period(tmp_path: Path) -> None:
    settings = make_settings(tmp_path, bus_shutdown_ms=2500)
    deps = Collaborators(settings=settings, repo=Repo(MEMORY_URL))

    (bus,) = [s for s in build_children("prod", False, Idle, deps=deps) if s.id == "bus_driver"]

    assert bus.shutdown_ms == 2500
    assert bus.factory().shutdown_timeout == 2.5


# -- capabilities ----------------------------------------------------------------


def test_parallelism_requires_two_cpus() -> None:
    assert verify_parallelism(1).failed
    assert "1 CPU usable" in verify_parallelism(1).message
    assert verify_parallelism(2).status == "ok"


def test_dirty_workers_require_process_pools() -> None:
    assert verify_dirty_workers(False).failed
    assert verify_dirty_workers(True).status == "ok"


@pytest.mark.asyncio
async def test_failed_capability_check_aborts(tmp_path: Path) -> None:
    bootstrap = Bootstrap(
        make_settings(tmp_path),
        capability_checks=(lambda: verify_parallelism(1),),
        repo=Repo(MEMORY_URL),
    )

    with pytest.raises(SystemExit) as excinfo:
        await bootstrap.start()

    assert excinfo.value.code == 1
    assert bootstrap.state is BootState.aborted
    assert bootstrap.supervisor is None


@pytest.mark.asyncio
async def test_unknown_adapter_aborts(tmp_path: Path) -> None:
    bootstrap = Bootstrap(
        make_settings(tmp_path, adapter="carrier-pigeon"),
        capability_checks=PASSING_CHECKS,
        repo=Repo(MEMORY_URL),
    )

    built: list[object] = []
    bootstrap.build_children = built.append  # type: ignore[method-assign]

    with pytest.raises(SystemExit):
        await bootstrap.start()

    assert bootstrap.state is BootState.aborted
    assert built == []
    assert bootstrap.supervisor is None


# -- full sequence ---------------------------------------------------------------


@pytest.mark.asyncio
async def test_reaches_running_with_matching_schema(tmp_path: Path, repo: Repo) -> None:
    await stamp(repo, "0002")
    bootstrap = Bootstrap(make_settings(tmp_path), capability_checks=PASSING_CHECKS, repo=repo)

    supervisor = await bootstrap.start()
    try:
        assert bootstrap.state is BootState.running
        assert supervisor.child_ids() == FULL_TREE
        with pytest.raises(RuntimeError):
            await bootstrap.start()
    finally:
        await bootstrap.stop()

    assert supervisor.child_ids() == []


@pytest.mark.asyncio
async def test_dev_drift_is_tolerated(tmp_path: Path, repo: Repo) -> None:
    await stamp(repo, "0001")
    settings = make_settings(tmp_path, env="dev", nochat="1")
    bootstrap = Bootstrap(settings, capability_checks=PASSING_CHECKS, repo=repo)

    supervisor = await bootstrap.start()
    try:
        assert bootstrap.state is BootState.running
        assert supervisor.child_ids() == ["repo", "token_reaper", "endpoint"]
    finally:
        await bootstrap.stop()


@pytest.mark.asyncio
async def test_prod_drift_aborts_and_stops_the_tree(tmp_path: Path, repo: Repo) -> None:
    await stamp(repo, "0001")
    bootstrap = Bootstrap(
        make_settings(tmp_path, env="prod"), capability_checks=PASSING_CHECKS, repo=repo
    )

    with pytest.raises(SystemExit):
        await bootstrap.start()

    assert bootstrap.state is BootState.aborted
    assert bootstrap.supervisor is not None
    assert bootstrap.supervisor.child_ids() == []


@pytest.mark.asyncio
async def test_missing_migration_directory_aborts(tmp_path: Path, repo: Repo) -> None:
    settings = make_settings(tmp_path, migrations_path=tmp_path / "nowhere")
    bootstrap = Bootstrap(settings, capability_checks=PASSING_CHECKS, repo=repo)

    with pytest.raises(SystemExit):
        await bootstrap.start()
    assert bootstrap.state is BootState.aborted


@pytest.mark.asyncio
async def test_unreachable_database_aborts(tmp_path: Path) -> None:
    unreachable = Repo(f"sqlite+aiosqlite:///{tmp_path / 'no' / 'such' / 'dir' / 'opsbot.db'}")
    bootstrap = Bootstrap(make_settings(tmp_path), capability_checks=PASSING_CHECKS, repo=unreachable)

    with pytest.raises(SystemExit):
        await bootstrap.start()
    assert bootstrap.state is BootState.aborted
    assert not unreachable.connected


@pytest.mark.asyncio
async def test_root_supervisor_failure_is_fatal(tmp_path: Path) -> None:
    class Crasher(Worker):
        async def run(self) -> None:
            raise RuntimeError("boom")

    bootstrap = Bootstrap(make_settings(tmp_path), repo=Repo(MEMORY_URL))
    bootstrap.supervisor = OneForOneSupervisor(
        [ChildSpec(id="flaky", factory=Crasher)], max_restarts=0
    )

    with pytest.raises(SystemExit) as excinfo:
        await bootstrap.wait()
    assert excinfo.value.code == 1
