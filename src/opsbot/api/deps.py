"""
opsbot.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Expose the process-wide `Repo` stored on app.state.
"""

from __future__ import annotations

from fastapi import Request

from opsbot.db.repo import Repo


def repo_from_app(request: Request) -> Repo:
    # Set by `opsbot.api.app.create_app`.
    return request.app.state.repo  # type: ignore[attr-defined]
