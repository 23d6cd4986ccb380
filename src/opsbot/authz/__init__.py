"""
opsbot.authz

Authorization model package.

Responsibilities:
- Validate group creation, renames, and deletion through an ordered validator pipeline.
- Grant and revoke roles/permissions through the `Grantable` protocol.
- Render groups for external consumers.
"""

# Package marker; import from submodules.
