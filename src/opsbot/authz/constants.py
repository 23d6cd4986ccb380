"""
opsbot.authz.constants

Distinguished authorization identifiers.

These names are the only place the protected admin group/role pair is spelled out;
validators, grant protocol, and seed data import them from here.
"""

from __future__ import annotations

from typing import Final

ADMIN_GROUP: Final = "opsbot-admin"
ADMIN_ROLE: Final = "opsbot-admin"
