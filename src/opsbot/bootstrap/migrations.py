"""
opsbot.bootstrap.migrations

Schema migration drift check.

Responsibilities:
- Read the newest migration version from the migration files on disk.
- Read the newest applied version from alembic's version table.
- Compare them: equal is fine, drift is a warning in dev and an error elsewhere.
"""

from __future__ import annotations

import re
from pathlib import Path

from alembic.runtime.migration import MigrationContext
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

from opsbot.bootstrap.capabilities import CheckResult

_VERSION_FILE = re.compile(r"^(\d+)_.+")

OK_MESSAGE = "Schema is at the current version"
DEV_DRIFT_MESSAGE = (
    "The migration schema is not synchronized. "
    "Allowing to continue in the development environment."
)
DRIFT_MESSAGE = (
    "The migration schema is not up-to-date. Please perform a migration and restart opsbot."
)


def file_version(migrations_path: Path) -> int:
    """
    Highest numeric prefix among `<version>_<description>` entries; 0 when none match.
    """

    versions = [
        int(match.group(1))
        for entry in migrations_path.iterdir()
        if entry.is_file() and (match := _VERSION_FILE.match(entry.name))
    ]
    return max(versions, default=0)


def _current_heads(connection: Connection, schema: str | None) -> tuple[str, ...]:
    context = MigrationContext.configure(
        connection=connection, opts={"version_table_schema": schema}
    )
    return tuple(context.get_current_heads())


async def database_version(engine: AsyncEngine, *, schema: str | None = None) -> int:
    """
    Highest numeric revision recorded as applied; 0 when nothing is applied. Revisions
    with non-numeric ids are not part of this project's scheme and are ignored.
    """

    async with engine.connect() as conn:
        heads = await conn.run_sync(_current_heads, schema)
    return max((int(head) for head in heads if head.isdigit()), default=0)


def compare_versions(*, file_v: int, database_v: int, env: str) -> CheckResult:
    if file_v == database_v:
        return CheckResult("ok", OK_MESSAGE)
    if env == "dev":
        return CheckResult("warning", DEV_DRIFT_MESSAGE)
    return CheckResult("error", DRIFT_MESSAGE)


async def check_schema_migration(
    engine: AsyncEngine,
    *,
    migrations_path: Path,
    schema: str | None,
    env: str,
) -> tuple[CheckResult, int, int]:
    file_v = file_version(migrations_path)
    database_v = await database_version(engine, schema=schema)
    return compare_versions(file_v=file_v, database_v=database_v, env=env), file_v, database_v


# --- Module Notes -----------------------------------------------------------
# Runs after the repo worker has connected: the database side needs a live engine.
