"""
opsbot.api.routers

HTTP routers.
"""

# Package marker.
