"""
opsbot.observability

Observability package.

Responsibilities:
- Structured logging configuration and flushing.
- Request context propagation for the health endpoint.
"""

# Package marker.
