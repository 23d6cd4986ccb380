"""
opsbot.authz.changeset

Immutable validation accumulator and the pipeline that threads it through validators.

Responsibilities:
- Hold the candidate entity, submitted params, cast changes, and per-field errors.
- Register constraints that can only be checked by the database at commit time and
  translate the resulting `IntegrityError` back into a field error.
- Run an ordered list of validators, each returning an updated changeset.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from functools import reduce
from typing import Any, Generic, Literal, TypeVar

from sqlalchemy.exc import IntegrityError

T = TypeVar("T")

Action = Literal["insert", "update", "delete"]

SQLITE_FOREIGN_KEY_FAILURE = "FOREIGN KEY constraint failed"


@dataclass(frozen=True, slots=True)
class Constraint:
    """
    A database constraint whose violation surfaces as a field error rather than an
    exception. `name` is matched against the driver error (Postgres reports it);
    `columns` covers drivers that only report the offending `table.column` (SQLite).
    """

    kind: Literal["unique", "foreign_key"]
    field: str
    name: str
    message: str
    columns: tuple[str, ...] = ()

    def matches(self, error_text: str) -> bool:
        if self.name in error_text:
            return True
        # SQLite names neither the constraint nor the column for FK failures.
        if self.kind == "foreign_key" and SQLITE_FOREIGN_KEY_FAILURE in error_text:
            return True
        return any(column in error_text for column in self.columns)


@dataclass(frozen=True)
class Changeset(Generic[T]):
    data: T
    action: Action
    params: Mapping[str, Any] = field(default_factory=dict)
    changes: Mapping[str, Any] = field(default_factory=dict)
    errors: dict[str, list[str]] = field(default_factory=dict)
    constraints: tuple[Constraint, ...] = ()
    # Set for empty submissions; such a changeset never becomes valid.
    forced_invalid: bool = False

    @property
    def valid(self) -> bool:
        return not self.forced_invalid and not self.errors

    def get_field(self, name: str) -> Any:
        if name in self.changes:
            return self.changes[name]
        return getattr(self.data, name, None)

    def put_change(self, name: str, value: Any) -> Changeset[T]:
        return dataclasses.replace(self, changes={**self.changes, name: value})

    def add_error(self, name: str, message: str) -> Changeset[T]:
        errors = {k: list(v) for k, v in self.errors.items()}
        errors.setdefault(name, []).append(message)
        return dataclasses.replace(self, errors=errors)

    def add_constraint(self, constraint: Constraint) -> Changeset[T]:
        return dataclasses.replace(self, constraints=(*self.constraints, constraint))

    def apply(self) -> T:
        """Write cast changes onto `data` and return it."""
        for name, value in self.changes.items():
            setattr(self.data, name, value)
        return self.data

    def constraint_error(self, exc: IntegrityError) -> Changeset[T] | None:
        """
        Map a commit-time integrity failure onto the first registered constraint it
        matches. Returns None when no constraint claims it.
        """

        text = str(exc.orig) if exc.orig is not None else str(exc)
        for constraint in self.constraints:
            if constraint.matches(text):
                return self.add_error(constraint.field, constraint.message)
        return None


Validator = Callable[[Changeset[T]], Changeset[T]]


def run_pipeline(changeset: Changeset[T], validators: Iterable[Validator[T]]) -> Changeset[T]:
    return reduce(lambda acc, validator: validator(acc), validators, changeset)


# --- Module Notes -----------------------------------------------------------
# Validators never mutate the changeset they receive; `apply()` is the only method
# that touches the candidate, and repositories call it only on valid changesets.
