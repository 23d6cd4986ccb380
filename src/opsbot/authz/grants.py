"""
opsbot.authz.grants

Grant/revoke protocol for entities that can hold roles and permissions.

Responsibilities:
- Define the `Grantable` capability interface.
- Implement it once for `Group` (`GroupGrants`), including the permanent admin grant.
- Dispatch `grant` / `revoke` by owner type through an explicit registry.
"""

from __future__ import annotations

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from opsbot.authz.constants import ADMIN_GROUP, ADMIN_ROLE
from opsbot.authz.errors import PermanentGrantViolation
from opsbot.db import join_table
from opsbot.db.models import Group, Permission, Role
from opsbot.observability.logging import get_logger

log = get_logger(__name__)

Principal = Role | Permission


class Grantable(Protocol):
    async def grant_to(self, session: AsyncSession, owner: Any, principal: Principal) -> bool: ...

    async def revoke_from(
        self, session: AsyncSession, owner: Any, principal: Principal
    ) -> bool: ...


class GroupGrants:
    """
    Grants for groups. Re-granting a principal the group already holds is a no-op and
    returns False; revoking one it does not hold likewise returns False.
    """

    async def grant_to(self, session: AsyncSession, owner: Group, principal: Principal) -> bool:
        _require_principal(principal)
        created = await join_table.associate(session, owner, principal)
        log.info(
            "grant",
            group=owner.name,
            principal=_principal_name(principal),
            created=created,
        )
        return created

    async def revoke_from(
        self, session: AsyncSession, owner: Group, principal: Principal
    ) -> bool:
        _require_principal(principal)
        if (
            owner.name == ADMIN_GROUP
            and isinstance(principal, Role)
            and principal.name == ADMIN_ROLE
        ):
            raise PermanentGrantViolation(role_name=principal.name, group_name=owner.name)

        removed = await join_table.dissociate(session, owner, principal)
        log.info(
            "revoke",
            group=owner.name,
            principal=_principal_name(principal),
            removed=removed,
        )
        return removed


_GRANTABLES: dict[type[Any], Grantable] = {
    Group: GroupGrants(),
}


def grantable_for(owner: Any) -> Grantable:
    try:
        return _GRANTABLES[type(owner)]
    except KeyError:
        raise TypeError(f"{type(owner).__name__} cannot hold grants") from None


async def grant(session: AsyncSession, owner: Any, principal: Principal) -> bool:
    return await grantable_for(owner).grant_to(session, owner, principal)


async def revoke(session: AsyncSession, owner: Any, principal: Principal) -> bool:
    return await grantable_for(owner).revoke_from(session, owner, principal)


def _require_principal(principal: Any) -> None:
    if not isinstance(principal, (Role, Permission)):
        raise TypeError(f"only roles and permissions can be granted, got {type(principal).__name__}")


def _principal_name(principal: Principal) -> str:
    return principal.full_name if isinstance(principal, Permission) else principal.name


# --- Module Notes -----------------------------------------------------------
# New owner types (e.g. users holding roles directly) add a class here and register
# it in `_GRANTABLES`; callers keep using `grant` / `revoke`.
