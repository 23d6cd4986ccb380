"""
opsbot.authz.groups

Validation rules for `Group`.

Responsibilities:
- Build create/update changesets (`group_changeset`) and delete changesets
  (`delete_changeset`) through an explicit, ordered validator pipeline.
- Protect the admin group from renames and deletion.
- Refuse to delete a group that still has granted roles or members.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

from opsbot.authz.changeset import Changeset, Constraint, Validator, run_pipeline
from opsbot.authz.constants import ADMIN_GROUP
from opsbot.db.models import Group

GroupChangeset = Changeset[Group]

ADMIN_GROUP_MESSAGE = "admin group may not be modified"
BLANK_MESSAGE = "can't be blank"
INVALID_MESSAGE = "is invalid"
ROLES_MESSAGE = "cannot delete group that has been granted roles"
MEMBERS_MESSAGE = "cannot delete group that has user members"
TAKEN_MESSAGE = "has already been taken"

CASTABLE_FIELDS = ("name",)
REQUIRED_FIELDS = ("name",)


def cast_name(changeset: GroupChangeset) -> GroupChangeset:
    # Only `name` is recognized; every other submitted key is dropped.
    if "name" in changeset.params:
        value = changeset.params["name"]
        if value is not None and not isinstance(value, str):
            return changeset.add_error("name", INVALID_MESSAGE)
        value = value.strip() if value else None
        if value != changeset.data.name:
            changeset = changeset.put_change("name", value)

    for name in REQUIRED_FIELDS:
        if not changeset.get_field(name):
            changeset = changeset.add_error(name, BLANK_MESSAGE)
    return changeset


def protect_admin_group(changeset: GroupChangeset) -> GroupChangeset:
    # Keyed on the persisted name, so no submitted params can get around it.
    if changeset.data.name == ADMIN_GROUP:
        return changeset.add_error("name", ADMIN_GROUP_MESSAGE)
    return changeset


def group_roles_constraint(changeset: GroupChangeset) -> GroupChangeset:
    changeset = changeset.add_constraint(
        Constraint(
            kind="foreign_key",
            field="id",
            name="group_roles_group_id_fkey",
            message=ROLES_MESSAGE,
        )
    )
    if changeset.action == "delete" and changeset.data.roles:
        changeset = changeset.add_error("id", ROLES_MESSAGE)
    return changeset


def user_group_membership_constraint(changeset: GroupChangeset) -> GroupChangeset:
    changeset = changeset.add_constraint(
        Constraint(
            kind="foreign_key",
            field="id",
            name="user_group_membership_group_id_fkey",
            message=MEMBERS_MESSAGE,
        )
    )
    if changeset.action == "delete" and changeset.data.users:
        changeset = changeset.add_error("id", MEMBERS_MESSAGE)
    return changeset


def unique_name_constraint(changeset: GroupChangeset) -> GroupChangeset:
    return changeset.add_constraint(
        Constraint(
            kind="unique",
            field="name",
            name="groups_name_index",
            message=TAKEN_MESSAGE,
            columns=("groups.name",),
        )
    )


WRITE_PIPELINE: tuple[Validator[Group], ...] = (
    cast_name,
    protect_admin_group,
    group_roles_constraint,
    user_group_membership_constraint,
    unique_name_constraint,
)

DELETE_PIPELINE: tuple[Validator[Group], ...] = (
    protect_admin_group,
    group_roles_constraint,
    user_group_membership_constraint,
)


def group_changeset(group: Group, params: Mapping[str, Any] | None = None) -> GroupChangeset:
    """
    Changeset for creating (`group` is transient) or updating `group` with `params`.

    Without params the changeset is invalid and no validation runs, so an empty
    submission can never be mistaken for a valid no-op.
    """

    action = "update" if group.id is not None else "insert"
    changeset = GroupChangeset(data=group, action=action, params=dict(params or {}))
    if not params:
        return dataclasses.replace(changeset, forced_invalid=True)
    return run_pipeline(changeset, WRITE_PIPELINE)


def delete_changeset(group: Group) -> GroupChangeset:
    """Changeset validating the intent to delete `group`."""
    return run_pipeline(GroupChangeset(data=group, action="delete"), DELETE_PIPELINE)


# --- Module Notes -----------------------------------------------------------
# The referential validators register their foreign-key constraints on every path;
# on delete they also check the loaded associations so the database is never asked.
