"""
opsbot.bootstrap

Process bootstrap sequencer.

Responsibilities:
- Verify runtime capabilities, resolve the chat adapter, build and start the
  supervision tree, and verify schema migrations before declaring the process healthy.
"""

# Package marker; the sequencer lives in `opsbot.bootstrap.sequencer`.
