"""
opsbot.db

Persistence package (SQLAlchemy async).

Responsibilities:
- ORM models for groups and the principals they reference.
- Engine/session setup, the join-table primitive, and repositories.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The bootstrap sequencer only touches this package through the repo worker; the
# group model uses it through repositories and `join_table`.
