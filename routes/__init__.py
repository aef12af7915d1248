"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.auth import router as auth_router
from routes.sessions import router as sessions_router

__all__ = [
    "auth_router",
    "sessions_router",
]
