"""
opsbot.auth.jwt

Relay credentials as signed JWTs.

Responsibilities:
- Mint short-lived tokens that name a relay and the bundles it may run.
- Validate tokens (signature, iss/aud/exp/iat/sub, token type) and return typed claims.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from opsbot.settings import Settings

TOKEN_TYPE = "relay"
DEFAULT_TTL = timedelta(minutes=15)


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    issuer: str
    audience: str
    secret: str

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.jwt_alg,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            secret=settings.jwt_secret,
        )


@dataclass(frozen=True, slots=True)
class RelayClaims:
    relay_id: str
    bundles: tuple[str, ...]
    token_id: str
    issued_at: datetime
    expires_at: datetime


class JwtValidationError(Exception):
    pass


def issue_relay_token(
    *,
    cfg: JwtConfig,
    relay_id: str,
    bundles: list[str],
    ttl: timedelta = DEFAULT_TTL,
) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": relay_id,
        "jti": uuid.uuid4().hex,
        "typ": TOKEN_TYPE,
        "bundles": sorted(set(bundles)),
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_relay_token(*, cfg: JwtConfig, token: str) -> RelayClaims:
    try:
        payload = jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={"require": ["exp", "iat", "iss", "aud", "sub", "jti"]},
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e

    if payload.get("typ") != TOKEN_TYPE:
        raise JwtValidationError(f"not a {TOKEN_TYPE} token")
    bundles = payload.get("bundles", [])
    if not isinstance(bundles, list) or not all(isinstance(b, str) for b in bundles):
        raise JwtValidationError("malformed bundles claim")

    return RelayClaims(
        relay_id=payload["sub"],
        bundles=tuple(bundles),
        token_id=payload["jti"],
        issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
    )


# --- Module Notes -----------------------------------------------------------
# Used by `workers.credentials.CredentialManager`; nothing else signs tokens.
