"""seed the admin group, the admin role, and their permanent grant

Revision ID: 0002
Revises: 0001
"""

from __future__ import annotations

import uuid

import sqlalchemy as sa
from alembic import op

from opsbot.authz.constants import ADMIN_GROUP, ADMIN_ROLE

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

# Fixed ids keep the seed reproducible across environments.
ADMIN_GROUP_ID = uuid.UUID("00000000-0000-4000-8000-000000000001")
ADMIN_ROLE_ID = uuid.UUID("00000000-0000-4000-8000-000000000002")

groups = sa.table("groups", sa.column("id", sa.Uuid()), sa.column("name", sa.String()))
roles = sa.table("roles", sa.column("id", sa.Uuid()), sa.column("name", sa.String()))
group_roles = sa.table(
    "group_roles", sa.column("group_id", sa.Uuid()), sa.column("role_id", sa.Uuid())
)


def upgrade() -> None:
    op.bulk_insert(roles, [{"id": ADMIN_ROLE_ID, "name": ADMIN_ROLE}])
    op.bulk_insert(groups, [{"id": ADMIN_GROUP_ID, "name": ADMIN_GROUP}])
    op.bulk_insert(group_roles, [{"group_id": ADMIN_GROUP_ID, "role_id": ADMIN_ROLE_ID}])


def downgrade() -> None:
    op.execute(group_roles.delete().where(group_roles.c.group_id == ADMIN_GROUP_ID))
    op.execute(groups.delete().where(groups.c.id == ADMIN_GROUP_ID))
    op.execute(roles.delete().where(roles.c.id == ADMIN_ROLE_ID))
