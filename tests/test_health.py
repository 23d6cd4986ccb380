"""
tests.test_health

Liveness/readiness probes on the public endpoint app.
"""

from __future__ import annotations

import httpx
import pytest

from opsbot.api.app import create_app
from opsbot.db.repo import Repo
from opsbot.settings import Settings


@pytest.mark.asyncio
async def test_health_endpoints(repo: Repo) -> None:
    app = create_app(settings=Settings(env="test"), repo=repo)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        r = await client.get("/healthz")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"
        assert r.headers["x-request-id"]

        r = await client.get("/readyz", headers={"x-request-id": "abc123"})
        assert r.status_code == 200
        assert r.json()["status"] == "ready"
        assert r.headers["x-request-id"] == "abc123"


@pytest.mark.asyncio
async def test_readyz_reports_disconnected_repo() -> None:
    app = create_app(settings=Settings(env="test"), repo=Repo("sqlite+aiosqlite:///:memory:"))

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        r = await client.get("/readyz")
        assert r.status_code == 503
