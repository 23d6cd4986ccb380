"""
opsbot.db.base

SQLAlchemy declarative base.

Responsibilities:
- Provide a shared DeclarativeBase for all ORM models.
- Fix constraint naming so commit-time errors can be mapped back by name.
"""

from __future__ import annotations

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Postgres-style names: `<table>_<column>_fkey`, `<table>_pkey`.
NAMING_CONVENTION = {
    "ix": "%(table_name)s_%(column_0_name)s_index",
    "uq": "%(table_name)s_%(column_0_name)s_index",
    "fk": "%(table_name)s_%(column_0_name)s_fkey",
    "pk": "%(table_name)s_pkey",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# --- Module Notes -----------------------------------------------------------
# All ORM models inherit from `Base` so alembic and `init_db` see one metadata.
