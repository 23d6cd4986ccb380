"""
opsbot.adapters

Chat backend adapters.

Responsibilities:
- The closed set of supported backends (`ChatAdapter`).
- A static registry mapping each backend to its supervisor factory.
"""

from opsbot.adapters.registry import AdapterRegistry, ChatAdapter, default_registry

__all__ = ["AdapterRegistry", "ChatAdapter", "default_registry"]
