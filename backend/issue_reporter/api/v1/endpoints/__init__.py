"""
Convenience exports for API v1 endpoint routers.

This allows ``from issue_reporter.api.v1.endpoints import issues_router``
style imports used by the aggregate router module.
"""

from .health import router as health_router
from .auth import router as auth_router
from .issues import router as issues_router, users_router
from .admin import router as admin_router
from .uploads import router as uploads_router

__all__ = [
    "health_router",
    "auth_router",
    "issues_router",
    "users_router",
    "admin_router",
    "uploads_router",
]
