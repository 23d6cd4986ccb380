"""
opsbot.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Liveness probe (`/healthz`).
- Readiness probe (`/readyz`): the repo is connected and answers a query.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from opsbot.api.deps import repo_from_app
from opsbot.db.repo import Repo

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(repo: Repo = Depends(repo_from_app)) -> dict[str, str]:
    # The repo worker may be mid-restart; report that instead of a 500.
    if not repo.connected:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="repo not connected")
    async with repo.session() as session:
        await session.execute(text("SELECT 1"))
    return {"status": "ready"}
