"""
tests.test_migrations

Version numbers on disk vs. in the database, and how drift is judged.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import text

from opsbot.bootstrap.migrations import (
    DEV_DRIFT_MESSAGE,
    DRIFT_MESSAGE,
    compare_versions,
    database_version,
    file_version,
)
from opsbot.db.repo import Repo

VERSIONS_DIR = Path(__file__).resolve().parents[1] / "alembic" / "versions"


async def stamp(repo: Repo, *revisions: str) -> None:
    async with repo.engine.begin() as conn:
        await conn.execute(
            text("CREATE TABLE alembic_version (version_num VARCHAR(32) NOT NULL PRIMARY KEY)")
        )
        for revision in revisions:
            await conn.execute(
                text("INSERT INTO alembic_version (version_num) VALUES (:v)"), {"v": revision}
            )


def test_file_version_picks_highest_numeric_prefix(tmp_path: Path) -> None:
    for name in ("0001_init.py", "0012_add_tokens.py", "0003_seed.py", "README", "notes_0099.txt"):
        (tmp_path / name).write_text("")
    (tmp_path / "0050_not_a_file").mkdir()

    assert file_version(tmp_path) == 12


def test_file_version_of_empty_directory(tmp_path: Path) -> None:
    assert file_version(tmp_path) == 0


def test_file_version_of_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        file_version(tmp_path / "missing")


def test_shipped_migrations() -> None:
    assert file_version(VERSIONS_DIR) == 2


@pytest.mark.asyncio
async def test_database_version_without_version_table(repo: Repo) -> None:
    assert await database_version(repo.engine) == 0


@pytest.mark.asyncio
async def test_database_version_reads_applied_revision(repo: Repo) -> None:
    await stamp(repo, "0002")

    assert await database_version(repo.engine) == 2


@pytest.mark.asyncio
async def test_database_version_ignores_non_numeric_heads(repo: Repo) -> None:
    await stamp(repo, "ae1027a6acf")

    assert await database_version(repo.engine) == 0


@pytest.mark.parametrize("env", ["dev", "test", "prod"])
def test_equal_versions_are_ok_everywhere(env: str) -> None:
    assert compare_versions(file_v=3, database_v=3, env=env).status == "ok"


def test_drift_is_a_warning_in_dev() -> None:
    result = compare_versions(file_v=3, database_v=2, env="dev")

    assert result.status == "warning"
    assert result.message == DEV_DRIFT_MESSAGE


@pytest.mark.parametrize("env", ["test", "prod"])
@pytest.mark.parametrize(("file_v", "database_v"), [(3, 2), (2, 3)])
def test_drift_is_an_error_outside_dev(env: str, file_v: int, database_v: int) -> None:
    result = compare_versions(file_v=file_v, database_v=database_v, env=env)

    assert result.failed
    assert result.message == DRIFT_MESSAGE
