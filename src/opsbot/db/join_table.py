"""
opsbot.db.join_table

Many-to-many link primitive shared by everything that grants or enrolls principals.

Responsibilities:
- Resolve the join model for an (owner, principal) pair from a closed table.
- Insert (`associate`) and delete (`dissociate`) join rows.
- Refresh the owner's matching collection so callers see the new state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from opsbot.db.models import (
    Group,
    GroupPermission,
    GroupRole,
    Permission,
    Role,
    User,
    UserGroupMembership,
)


@dataclass(frozen=True, slots=True)
class JoinSpec:
    model: type[Any]
    owner_key: str
    principal_key: str
    collection: str


_JOINS: dict[tuple[type[Any], type[Any]], JoinSpec] = {
    (Group, Role): JoinSpec(GroupRole, "group_id", "role_id", "roles"),
    (Group, Permission): JoinSpec(GroupPermission, "group_id", "permission_id", "permissions"),
    (Group, User): JoinSpec(UserGroupMembership, "group_id", "member_id", "users"),
}


class UnsupportedAssociation(TypeError):
    pass


def join_spec(owner: Any, principal: Any) -> JoinSpec:
    try:
        return _JOINS[(type(owner), type(principal))]
    except KeyError:
        raise UnsupportedAssociation(
            f"no join table links {type(owner).__name__} to {type(principal).__name__}"
        ) from None


async def is_associated(session: AsyncSession, owner: Any, principal: Any) -> bool:
    spec = join_spec(owner, principal)
    stmt = select(spec.model).where(
        getattr(spec.model, spec.owner_key) == owner.id,
        getattr(spec.model, spec.principal_key) == principal.id,
    )
    return (await session.execute(stmt)).first() is not None


async def associate(session: AsyncSession, owner: Any, principal: Any) -> bool:
    """
    Link `principal` to `owner`. Returns False when the link already existed, in which
    case nothing is written.
    """

    spec = join_spec(owner, principal)
    if await is_associated(session, owner, principal):
        return False

    session.add(spec.model(**{spec.owner_key: owner.id, spec.principal_key: principal.id}))
    await session.flush()
    await session.refresh(owner, [spec.collection])
    return True


async def dissociate(session: AsyncSession, owner: Any, principal: Any) -> bool:
    """
    Remove the link between `owner` and `principal`. Returns False when there was none.
    """

    spec = join_spec(owner, principal)
    stmt = delete(spec.model).where(
        getattr(spec.model, spec.owner_key) == owner.id,
        getattr(spec.model, spec.principal_key) == principal.id,
    )
    result = await session.execute(stmt)
    await session.flush()
    await session.refresh(owner, [spec.collection])
    return bool(result.rowcount)


# --- Module Notes -----------------------------------------------------------
# Nothing here commits; the caller owns the transaction boundary.
