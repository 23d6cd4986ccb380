"""
opsbot.workers.credentials

Credential manager for relay authentication.

Responsibilities:
- Hold the signing configuration for the lifetime of the worker.
- Issue and verify relay tokens; track which relays currently hold one.
"""

from __future__ import annotations

from datetime import timedelta

from opsbot.auth.jwt import (
    DEFAULT_TTL,
    JwtConfig,
    RelayClaims,
    decode_relay_token,
    issue_relay_token,
)
from opsbot.observability.logging import get_logger
from opsbot.settings import Settings
from opsbot.supervision.worker import Worker

log = get_logger(__name__)


class CredentialManager(Worker):
    name = "credential_manager"

    def __init__(self, settings: Settings) -> None:
        super().__init__()
        self._settings = settings
        self._cfg: JwtConfig | None = None
        self.issued: dict[str, int] = {}

    async def start(self) -> None:
        self._cfg = JwtConfig.from_settings(self._settings)
        log.info("credentials_loaded", issuer=self._cfg.issuer)

    @property
    def config(self) -> JwtConfig:
        if self._cfg is None:
            raise RuntimeError("credential manager not started")
        return self._cfg

    def issue(self, relay_id: str, bundles: list[str], *, ttl: timedelta = DEFAULT_TTL) -> str:
        token = issue_relay_token(cfg=self.config, relay_id=relay_id, bundles=bundles, ttl=ttl)
        self.issued[relay_id] = self.issued.get(relay_id, 0) + 1
        log.info("relay_token_issued", relay=relay_id, bundles=sorted(bundles))
        return token

    def verify(self, token: str) -> RelayClaims:
        return decode_relay_token(cfg=self.config, token=token)
