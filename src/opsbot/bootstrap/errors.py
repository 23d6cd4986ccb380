"""
opsbot.bootstrap.errors

Startup failures. Any of these stops the process before it reaches `RUNNING`;
restarting after fixing the cause is the only remedy.
"""

from __future__ import annotations


class BootstrapError(Exception):
    pass


class CapabilityError(BootstrapError):
    """The interpreter or host cannot run the service (parallelism, process pools)."""


class ConfigurationError(BootstrapError):
    """Unknown chat adapter, or one without a registered supervisor."""


class MigrationDriftError(BootstrapError):
    def __init__(self, message: str, *, file_version: int, database_version: int) -> None:
        self.file_version = file_version
        self.database_version = database_version
        super().__init__(message)


class SupervisionStartError(BootstrapError):
    """A child failed to start while the supervision tree was being brought up."""
