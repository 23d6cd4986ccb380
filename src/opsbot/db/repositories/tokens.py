"""
opsbot.db.repositories.tokens

Repository for `Token` rows.

Responsibilities:
- Issue tokens with an explicit expiry.
- Delete every token whose expiry has passed.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from opsbot.db.models import Token


class TokenRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def issue(self, *, user_id: uuid.UUID, ttl: timedelta) -> Token:
        now = datetime.utcnow()
        token = Token(
            user_id=user_id,
            value=secrets.token_urlsafe(32),
            inserted_at=now,
            expires_at=now + ttl,
        )
        self._session.add(token)
        await self._session.flush()
        return token

    async def delete_expired(self, *, now: datetime | None = None) -> int:
        cutoff = now or datetime.utcnow()
        result = await self._session.execute(delete(Token).where(Token.expires_at < cutoff))
        return result.rowcount or 0
