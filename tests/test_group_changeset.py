"""
tests.test_group_changeset

Validator pipeline behaviour, without a database.
"""

from __future__ import annotations

import uuid
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

from opsbot.authz.constants import ADMIN_GROUP
from opsbot.authz.groups import (
    ADMIN_GROUP_MESSAGE,
    BLANK_MESSAGE,
    MEMBERS_MESSAGE,
    ROLES_MESSAGE,
    TAKEN_MESSAGE,
    delete_changeset,
    group_changeset,
)
from opsbot.db.models import Group


def _persisted(name: str, *, roles=(), users=()) -> SimpleNamespace:
    return SimpleNamespace(id=uuid.uuid4(), name=name, roles=list(roles), users=list(users))


@pytest.mark.parametrize("params", [None, {}])
def test_empty_params_are_invalid_without_running_validators(params) -> None:
    cs = group_changeset(Group(), params)
    assert not cs.valid
    assert cs.errors == {}
    assert cs.constraints == ()


def test_create_casts_only_name() -> None:
    cs = group_changeset(Group(), {"name": "ops", "id": "forged", "roles": ["x"]})
    assert cs.valid
    assert cs.action == "insert"
    assert dict(cs.changes) == {"name": "ops"}
    assert "groups_name_index" in {c.name for c in cs.constraints}


@pytest.mark.parametrize("name", ["", "   ", None])
def test_blank_name_is_rejected(name) -> None:
    cs = group_changeset(Group(), {"name": name})
    assert cs.errors["name"] == [BLANK_MESSAGE]


def test_non_string_name_is_rejected() -> None:
    cs = group_changeset(Group(), {"name": 42})
    assert not cs.valid
    assert "name" in cs.errors


def test_update_without_name_keeps_current_name() -> None:
    cs = group_changeset(_persisted("ops"), {"description": "ignored"})
    assert cs.valid
    assert cs.action == "update"
    assert dict(cs.changes) == {}


@pytest.mark.parametrize("params", [{"name": "renamed"}, {"name": ADMIN_GROUP}, {"other": 1}])
def test_admin_group_may_not_be_modified(params) -> None:
    cs = group_changeset(_persisted(ADMIN_GROUP), params)
    assert not cs.valid
    assert ADMIN_GROUP_MESSAGE in cs.errors["name"]


def test_admin_group_may_not_be_deleted() -> None:
    cs = delete_changeset(_persisted(ADMIN_GROUP))
    assert cs.action == "delete"
    assert cs.errors["name"] == [ADMIN_GROUP_MESSAGE]


def test_delete_of_empty_group_is_valid() -> None:
    assert delete_changeset(_persisted("ops")).valid


def test_delete_rejects_granted_roles_and_members() -> None:
    cs = delete_changeset(_persisted("ops", roles=[object()]))
    assert cs.errors == {"id": [ROLES_MESSAGE]}

    cs = delete_changeset(_persisted("ops", users=[object()]))
    assert cs.errors == {"id": [MEMBERS_MESSAGE]}

    cs = delete_changeset(_persisted("ops", roles=[object()], users=[object()]))
    assert cs.errors == {"id": [ROLES_MESSAGE, MEMBERS_MESSAGE]}


def test_referential_constraints_are_registered_on_update() -> None:
    cs = group_changeset(_persisted("ops"), {"name": "dev"})
    names = [c.name for c in cs.constraints]
    assert names == [
        "group_roles_group_id_fkey",
        "user_group_membership_group_id_fkey",
        "groups_name_index",
    ]


def test_validators_do_not_mutate_candidate() -> None:
    group = Group()
    cs = group_changeset(group, {"name": "ops"})
    assert group.name is None
    assert cs.apply() is group
    assert group.name == "ops"


def test_unnamed_sqlite_foreign_key_failure_maps_to_referential_error() -> None:
    cs = delete_changeset(_persisted("ops"))
    exc = IntegrityError("DELETE FROM groups", {}, Exception("FOREIGN KEY constraint failed"))

    rejected = cs.constraint_error(exc)

    assert rejected is not None
    assert rejected.errors == {"id": [ROLES_MESSAGE]}


def test_unique_failure_does_not_match_foreign_keys() -> None:
    cs = group_changeset(_persisted("ops"), {"name": "qa"})
    exc = IntegrityError("UPDATE groups", {}, Exception("UNIQUE constraint failed: groups.name"))

    assert cs.constraint_error(exc).errors == {"name": [TAKEN_MESSAGE]}
