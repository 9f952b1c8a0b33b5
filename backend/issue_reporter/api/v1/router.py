"""
API v1 router - aggregates all endpoint routers.
"""

from fastapi import APIRouter

from issue_reporter.api.v1.endpoints.admin import router as admin_router
from issue_reporter.api.v1.endpoints.auth import router as auth_router
from issue_reporter.api.v1.endpoints.health import router as health_router
from issue_reporter.api.v1.endpoints.issues import router as issues_router
from issue_reporter.api.v1.endpoints.issues import users_router
from issue_reporter.api.v1.endpoints.uploads import router as uploads_router

api_router = APIRouter()

api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(issues_router, prefix="/issues", tags=["issues"])
api_router.include_router(users_router, prefix="/users", tags=["issues"])
api_router.include_router(admin_router, prefix="/admin", tags=["admin"])
api_router.include_router(uploads_router, prefix="/uploads", tags=["uploads"])
