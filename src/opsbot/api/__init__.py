"""
opsbot.api

Public HTTP surface (liveness/readiness only).
"""

# Package marker.
