"""
opsbot.db.models

Persistence schema for the authorization model.

Responsibilities:
- Define `Group`, the authorization unit owned by this service.
- Define the externally-owned principals a group references (`User`, `Role`,
  `Permission`) and the join tables linking them.
- Define `Token`, the rows swept by the token reaper.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String, UniqueConstraint, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from opsbot.db.base import Base


def _utcnow() -> datetime:
    # Naive UTC timestamps; the reaper compares against the same clock.
    return datetime.utcnow()


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name})>"


class Permission(Base):
    __tablename__ = "permissions"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    namespace: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    __table_args__ = (UniqueConstraint("namespace", "name"),)

    @property
    def full_name(self) -> str:
        return f"{self.namespace}:{self.name}"


class Group(Base):
    __tablename__ = "groups"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # Unique index name is `groups_name_index`; see `authz.changeset` constraint mapping.
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # selectin keeps associations usable from async code without implicit IO.
    users: Mapped[list[User]] = relationship(
        secondary="user_group_membership", lazy="selectin", viewonly=True
    )
    roles: Mapped[list[Role]] = relationship(
        secondary="group_roles", lazy="selectin", viewonly=True
    )
    permissions: Mapped[list[Permission]] = relationship(
        secondary="group_permissions", lazy="selectin", viewonly=True
    )

    def __repr__(self) -> str:
        return f"<Group(id={self.id}, name={self.name})>"


class UserGroupMembership(Base):
    __tablename__ = "user_group_membership"

    member_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("users.id"), primary_key=True
    )
    group_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("groups.id"), primary_key=True
    )


class GroupRole(Base):
    __tablename__ = "group_roles"

    group_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("groups.id"), primary_key=True
    )
    role_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("roles.id"), primary_key=True
    )


class GroupPermission(Base):
    __tablename__ = "group_permissions"

    group_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("groups.id"), primary_key=True
    )
    permission_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("permissions.id"), primary_key=True
    )


class Token(Base):
    __tablename__ = "tokens"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    value: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    inserted_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    expires_at: Mapped[datetime] = mapped_column(nullable=False, index=True)


# --- Module Notes -----------------------------------------------------------
# Join tables are written only through `db.join_table`; the relationships above are
# view-only so the ORM never issues its own inserts/deletes against them.
