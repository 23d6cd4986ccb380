"""
opsbot.api.app

FastAPI app factory for the public endpoint.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Attach the process-wide `Repo` so handlers share the repo worker's engine.
"""

from __future__ import annotations

from fastapi import FastAPI

from opsbot import __version__
from opsbot.api.routers.health import router as health_router
from opsbot.db.repo import Repo
from opsbot.observability.middleware import RequestContextMiddleware
from opsbot.settings import Settings


def create_app(*, settings: Settings, repo: Repo) -> FastAPI:
    app = FastAPI(
        title=settings.service_name,
        version=__version__,
        docs_url=None,
        openapi_url=None,
    )
    app.state.repo = repo
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    return app


# --- Module Notes -----------------------------------------------------------
# Logging is configured by the process entrypoint before bootstrap, not here; the app
# is built on every endpoint (re)start.
