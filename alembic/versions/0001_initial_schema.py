"""initial schema: groups, principals, join tables, tokens

Revision ID: 0001
Revises:
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True)


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("username", sa.String(255), nullable=False),
        sa.UniqueConstraint("username", name="users_username_index"),
    )
    op.create_table(
        "roles",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.UniqueConstraint("name", name="roles_name_index"),
    )
    op.create_table(
        "permissions",
        _id(),
        sa.Column("namespace", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.UniqueConstraint("namespace", "name", name="permissions_namespace_index"),
    )
    op.create_table(
        "groups",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.UniqueConstraint("name", name="groups_name_index"),
    )
    op.create_table(
        "user_group_membership",
        sa.Column(
            "member_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", name="user_group_membership_member_id_fkey"),
            primary_key=True,
        ),
        sa.Column(
            "group_id",
            sa.Uuid(),
            sa.ForeignKey("groups.id", name="user_group_membership_group_id_fkey"),
            primary_key=True,
        ),
    )
    op.create_table(
        "group_roles",
        sa.Column(
            "group_id",
            sa.Uuid(),
            sa.ForeignKey("groups.id", name="group_roles_group_id_fkey"),
            primary_key=True,
        ),
        sa.Column(
            "role_id",
            sa.Uuid(),
            sa.ForeignKey("roles.id", name="group_roles_role_id_fkey"),
            primary_key=True,
        ),
    )
    op.create_table(
        "group_permissions",
        sa.Column(
            "group_id",
            sa.Uuid(),
            sa.ForeignKey("groups.id", name="group_permissions_group_id_fkey"),
            primary_key=True,
        ),
        sa.Column(
            "permission_id",
            sa.Uuid(),
            sa.ForeignKey("permissions.id", name="group_permissions_permission_id_fkey"),
            primary_key=True,
        ),
    )
    op.create_table(
        "tokens",
        _id(),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", name="tokens_user_id_fkey"),
            nullable=False,
        ),
        sa.Column("value", sa.String(255), nullable=False),
        sa.Column("inserted_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("value", name="tokens_value_index"),
    )
    op.create_index("tokens_user_id_index", "tokens", ["user_id"])
    op.create_index("tokens_expires_at_index", "tokens", ["expires_at"])


def downgrade() -> None:
    for table in (
        "tokens",
        "group_permissions",
        "group_roles",
        "user_group_membership",
        "groups",
        "permissions",
        "roles",
        "users",
    ):
        op.drop_table(table)
