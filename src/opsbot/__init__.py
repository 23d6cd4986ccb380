"""
opsbot

Top-level package for the opsbot chat-ops service core.

Responsibilities:
- Expose package version metadata.
- Name the embedded command bundle and the site namespace.
"""

__all__ = ["__version__", "EMBEDDED_BUNDLE", "SITE_NAMESPACE"]

__version__ = "0.1.0"

# Name of the command bundle shipped inside the service.
EMBEDDED_BUNDLE = "operable"

# Namespace reserved for site-local commands.
SITE_NAMESPACE = "site"


# --- Module Notes -----------------------------------------------------------
# Keep this file minimal to avoid import-time side effects across the codebase.
