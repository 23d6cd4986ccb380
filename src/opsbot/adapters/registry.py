"""
opsbot.adapters.registry

Closed registry of chat backends.

Responsibilities:
- Parse the configured adapter name (case-insensitive) into `ChatAdapter`.
- Map each adapter to a statically registered supervisor factory.
- Report unknown or unregistered adapters as `ConfigurationError`.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Mapping

from opsbot.adapters.supervisor import AdapterSupervisor
from opsbot.bootstrap.errors import ConfigurationError
from opsbot.settings import Settings
from opsbot.supervision.worker import Worker

SupervisorFactory = Callable[[Settings], Worker]


class ChatAdapter(enum.StrEnum):
    slack = "slack"
    hipchat = "hipchat"
    irc = "irc"
    null = "null"
    test = "test"

    @classmethod
    def parse(cls, value: str) -> ChatAdapter:
        normalized = value.lower()
        try:
            return cls(normalized)
        except ValueError:
            raise ConfigurationError(
                f"The adapter is set to '{normalized}', but I don't know what that is. "
                "Try 'slack' or 'hipchat' instead."
            ) from None

    @property
    def supervisor_name(self) -> str:
        return f"{self.value}_adapter_supervisor"


class AdapterRegistry:
    def __init__(self, factories: Mapping[ChatAdapter, SupervisorFactory] | None = None) -> None:
        self._factories: dict[ChatAdapter, SupervisorFactory] = dict(factories or {})

    def register(self, adapter: ChatAdapter, factory: SupervisorFactory) -> None:
        self._factories[adapter] = factory

    def unregister(self, adapter: ChatAdapter) -> None:
        self._factories.pop(adapter, None)

    def registered(self) -> list[ChatAdapter]:
        return [adapter for adapter in ChatAdapter if adapter in self._factories]

    def supervisor_for(self, adapter: ChatAdapter) -> SupervisorFactory:
        try:
            return self._factories[adapter]
        except KeyError:
            raise ConfigurationError(
                f"{adapter.supervisor_name} was not found. "
                f"Please define a supervisor for the {adapter.value} adapter"
            ) from None


def _adapter_supervisor(adapter: ChatAdapter) -> SupervisorFactory:
    def factory(settings: Settings) -> Worker:
        return AdapterSupervisor(adapter.value, settings)

    return factory


def default_registry() -> AdapterRegistry:
    return AdapterRegistry({adapter: _adapter_supervisor(adapter) for adapter in ChatAdapter})


# --- Module Notes -----------------------------------------------------------
# Adding a backend means adding an enum member and a registry entry; nothing is
# looked up by name at runtime.
