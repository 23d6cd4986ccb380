"""
opsbot.workers

Long-running children started by the bootstrap sequencer.

Responsibilities:
- Persistence, message bus, token reaping, template caching, relay credentials,
  relay/command supervision, and the public HTTP endpoint.
"""

# Package marker; import from submodules.
