"""RepoLens HTTP server.

The FastAPI application lives in ``repolens.server.app``.
"""

from repolens.server.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
