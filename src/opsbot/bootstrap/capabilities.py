"""
opsbot.bootstrap.capabilities

Runtime capability checks and the result type shared by every startup check.

Responsibilities:
- Require at least two usable CPUs.
- Require process-pool support for isolating long-running/blocking work.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

Status = Literal["ok", "warning", "error"]

MIN_CPUS = 2


@dataclass(frozen=True, slots=True)
class CheckResult:
    status: Status
    message: str

    @property
    def failed(self) -> bool:
        return self.status == "error"


def usable_cpus() -> int:
    # Affinity reflects cgroup/taskset limits; cpu_count does not.
    if hasattr(os, "sched_getaffinity"):
        return len(os.sched_getaffinity(0))
    return os.cpu_count() or 1


def process_pool_supported() -> bool:
    try:
        import multiprocessing.synchronize  # noqa: F401
    except ImportError:
        return False
    return True


def verify_parallelism(cpus: int | None = None) -> CheckResult:
    cpus = usable_cpus() if cpus is None else cpus
    if cpus < MIN_CPUS:
        return CheckResult(
            "error",
            f"Parallel execution unavailable: {cpus} CPU usable, {MIN_CPUS} required.\n"
            "Parallelism can be enabled via one of the following:\n\n"
            "  1. Give the container at least two CPUs (e.g. `docker run --cpus=2`).\n"
            "  2. Widen the process CPU affinity (e.g. `taskset -c 0,1`).\n",
        )
    return CheckResult("ok", f"Parallel execution enabled ({cpus} CPUs).")


def verify_dirty_workers(supported: bool | None = None) -> CheckResult:
    supported = process_pool_supported() if supported is None else supported
    if not supported:
        return CheckResult(
            "error",
            "Python runtime is missing process pool support (no working sem_open).\n"
            "See https://docs.python.org/3/library/multiprocessing.html for platform "
            "requirements.\n",
        )
    return CheckResult("ok", "Process pool workers enabled.")
