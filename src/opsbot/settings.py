"""
opsbot.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the bootstrap sequencer and workers.
- Hide secrets from repr/logging (e.g., the credential signing secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration, `OPSBOT_` prefixed.
    Defaults are safe for local dev.
    """

    model_config = SettingsConfigDict(env_prefix="OPSBOT_", case_sensitive=False)

    # "dev" relaxes migration drift to a warning and honours `nochat`.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "opsbot"
    log_level: str = "INFO"

    # Any non-empty value disables chat-related workers (dev only).
    nochat: str | None = None

    # Chat backend; validated against the closed adapter registry at boot.
    adapter: str = "null"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./opsbot.db"
    migrations_path: Path = Path("alembic/versions")
    migration_schema: str | None = None

    # Workers
    bus_shutdown_ms: int = 10000
    token_reap_interval: float = 60.0
    template_ttl: float = 300.0

    # Credentials minted for relays
    jwt_alg: str = "HS256"
    jwt_issuer: str = "opsbot"
    jwt_audience: str = "opsbot-relay"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)

    # Supervisor restart intensity
    max_restarts: int = 3
    max_restart_seconds: float = 5.0

    @property
    def chat_disabled(self) -> bool:
        return bool(self.nochat)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Every worker receives this object from the sequencer; keep field names stable since
# they double as the `OPSBOT_*` environment contract.
