"""
opsbot.authz.views

External representations of groups.

Responsibilities:
- `GroupSummary`: the primary API shape (`id`, `name`).
- `external_view`: the shape rendered by the group chat command, which also lists
  roles and exposes the user set as `members`.
"""

from __future__ import annotations

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict

from opsbot.db.models import Group


class GroupSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str


class RoleRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str


class MemberRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str


class GroupChatView(BaseModel):
    id: uuid.UUID
    name: str
    roles: list[RoleRef]
    members: list[MemberRef]


def external_view(group: Group) -> dict[str, Any]:
    # The chat command and the API disagree on group shape; keep both until they are unified.
    view = GroupChatView(
        id=group.id,
        name=group.name,
        roles=[RoleRef.model_validate(role) for role in group.roles],
        members=[MemberRef.model_validate(user) for user in group.users],
    )
    return view.model_dump(mode="json")


def summary_view(group: Group) -> dict[str, Any]:
    return GroupSummary.model_validate(group).model_dump(mode="json")
