"""
opsbot.supervision

Supervision package.

Responsibilities:
- The lifecycle contract every long-running child honours (`Worker`).
- A one-for-one supervisor that restarts only the child that failed.
"""

from opsbot.supervision.supervisor import OneForOneSupervisor, RestartIntensityExceeded
from opsbot.supervision.worker import ChildSpec, PeriodicWorker, Worker

__all__ = [
    "ChildSpec",
    "OneForOneSupervisor",
    "PeriodicWorker",
    "RestartIntensityExceeded",
    "Worker",
]
