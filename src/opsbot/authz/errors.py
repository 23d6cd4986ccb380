"""
opsbot.authz.errors

Exceptions raised by the group model.

Responsibilities:
- Carry a rejected changeset back to the caller (`ValidationError`).
- Signal an attempt to break the admin group's permanent role grant.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from opsbot.authz.changeset import Changeset


class ValidationError(Exception):
    """
    Raised when a changeset is invalid, either up front or after the database rejected
    it at commit time. Nothing was written.
    """

    def __init__(self, changeset: Changeset) -> None:
        self.changeset = changeset
        super().__init__(f"invalid {changeset.action} changeset: {changeset.errors or 'no changes'}")

    @property
    def errors(self) -> dict[str, list[str]]:
        return self.changeset.errors


class PermanentGrantViolation(Exception):
    reason = "permanent_role_grant"

    def __init__(self, *, role_name: str, group_name: str) -> None:
        self.role_name = role_name
        self.group_name = group_name
        super().__init__(f"role {role_name!r} may not be revoked from group {group_name!r}")


# --- Module Notes -----------------------------------------------------------
# Neither exception is fatal to the process; callers correct input and resubmit.
