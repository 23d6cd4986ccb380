"""
tests.factories

Seed helpers for principals and the admin grant.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from opsbot.authz.constants import ADMIN_GROUP, ADMIN_ROLE
from opsbot.db.models import Group, GroupRole, Role, User


async def add_role(session: AsyncSession, name: str) -> Role:
    role = Role(name=name)
    session.add(role)
    await session.commit()
    return role


async def add_user(session: AsyncSession, username: str) -> User:
    user = User(username=username)
    session.add(user)
    await session.commit()
    return user


async def seed_admin(session: AsyncSession) -> tuple[Group, Role]:
    # Mirrors the 0002 seed migration.
    role = Role(name=ADMIN_ROLE)
    group = Group(name=ADMIN_GROUP)
    session.add_all([role, group])
    await session.flush()
    session.add(GroupRole(group_id=group.id, role_id=role.id))
    await session.commit()
    await session.refresh(group, ["roles", "users"])
    return group, role
