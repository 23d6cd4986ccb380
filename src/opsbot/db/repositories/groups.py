"""
opsbot.db.repositories.groups

Repository for `Group` entities.

Responsibilities:
- Create, rename, and delete groups through validated changesets.
- Map commit-time constraint failures (duplicate names, live references) onto
  `ValidationError` so callers get field errors instead of driver exceptions.
- Manage group membership through the join-table primitive.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from opsbot.authz.changeset import Changeset
from opsbot.authz.errors import ValidationError
from opsbot.authz.groups import delete_changeset, group_changeset
from opsbot.db import join_table
from opsbot.db.models import Group, User
from opsbot.observability.logging import get_logger

log = get_logger(__name__)


class GroupRepo:
    """
    Every mutating method is one transaction: it commits on success and rolls back
    (leaving persisted state untouched) on failure.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, group_id: uuid.UUID) -> Group | None:
        return await self._session.get(Group, group_id)

    async def get_by_name(self, name: str) -> Group | None:
        stmt = select(Group).where(Group.name == name)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_all(self) -> list[Group]:
        stmt = select(Group).order_by(Group.name)
        return list((await self._session.execute(stmt)).scalars().all())

    async def create(self, params: Mapping[str, Any] | None) -> Group:
        changeset = group_changeset(Group(), params)
        if not changeset.valid:
            raise ValidationError(changeset)

        group = changeset.apply()
        self._session.add(group)
        await self._commit(changeset)
        # Load the (empty) associations now; lazy loads are not allowed under asyncio.
        await self._session.refresh(group, ["users", "roles", "permissions"])
        log.info("group_created", group=group.name)
        return group

    async def update(self, group: Group, params: Mapping[str, Any] | None) -> Group:
        changeset = group_changeset(group, params)
        if not changeset.valid:
            raise ValidationError(changeset)

        changeset.apply()
        try:
            await self._commit(changeset)
        except ValidationError:
            # The rollback expired `group`; reload the persisted (old) name.
            await self._session.refresh(group)
            await self._session.refresh(group, ["users", "roles", "permissions"])
            raise
        log.info("group_updated", group=group.name, changes=dict(changeset.changes))
        return group

    async def delete(self, group: Group) -> None:
        # Validate against current associations, not whatever was loaded earlier.
        await self._session.refresh(group, ["roles", "users"])
        changeset = delete_changeset(group)
        if not changeset.valid:
            raise ValidationError(changeset)

        await self._session.delete(group)
        try:
            await self._commit(changeset)
        except ValidationError as exc:
            # A grant or membership landed after the check above. The driver may not say
            # which, so re-validate against what is there now.
            await self._session.refresh(group, ["roles", "users"])
            current = delete_changeset(group)
            if current.valid:
                raise
            raise ValidationError(current) from exc
        log.info("group_deleted", group=group.name)

    async def add_member(self, group: Group, user: User) -> bool:
        added = await join_table.associate(self._session, group, user)
        await self._session.commit()
        return added

    async def remove_member(self, group: Group, user: User) -> bool:
        removed = await join_table.dissociate(self._session, group, user)
        await self._session.commit()
        return removed

    async def _commit(self, changeset: Changeset[Group]) -> None:
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            rejected = changeset.constraint_error(exc)
            if rejected is None:
                raise
            log.info("group_rejected", action=changeset.action, errors=rejected.errors)
            raise ValidationError(rejected) from exc


# --- Module Notes -----------------------------------------------------------
# Grants are not handled here; see `authz.grants`, which leaves the commit to its caller.
