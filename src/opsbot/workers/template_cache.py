"""
opsbot.workers.template_cache

Compiled-template cache for command output rendering.

Responsibilities:
- Compile templates once in a sandboxed jinja2 environment and reuse them.
- Expire entries after a TTL, or sooner when a template's source changes.
"""

from __future__ import annotations

import hashlib
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from jinja2 import Template
from jinja2.sandbox import SandboxedEnvironment

from opsbot.observability.logging import get_logger
from opsbot.supervision.worker import PeriodicWorker

log = get_logger(__name__)


@dataclass(slots=True)
class _Entry:
    digest: str
    template: Template
    expires_at: float


class TemplateCache(PeriodicWorker):
    name = "template_cache"

    def __init__(
        self,
        *,
        ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self.ttl = ttl
        # Sweep a few times per TTL so stale entries don't linger long.
        self.interval = max(ttl / 4, 1.0)
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._env = SandboxedEnvironment(autoescape=False, trim_blocks=True, lstrip_blocks=True)

    def __len__(self) -> int:
        return len(self._entries)

    def fetch(self, name: str, source: str) -> Template:
        digest = hashlib.sha256(source.encode("utf-8")).hexdigest()
        now = self._clock()
        entry = self._entries.get(name)
        if entry is not None and entry.digest == digest and entry.expires_at > now:
            return entry.template

        template = self._env.from_string(source)
        self._entries[name] = _Entry(digest=digest, template=template, expires_at=now + self.ttl)
        log.debug("template_compiled", template=name)
        return template

    def render(self, name: str, source: str, context: Mapping[str, Any]) -> str:
        return self.fetch(name, source).render(**context)

    def evict_expired(self) -> int:
        now = self._clock()
        expired = [name for name, entry in self._entries.items() if entry.expires_at <= now]
        for name in expired:
            del self._entries[name]
        return len(expired)

    async def tick(self) -> None:
        evicted = self.evict_expired()
        if evicted:
            log.debug("templates_evicted", count=evicted)
