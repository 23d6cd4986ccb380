"""
opsbot.auth

Relay credential helpers.

Responsibilities:
- Mint and verify the short-lived JWTs relays present to the bot.
"""

# Package marker.
