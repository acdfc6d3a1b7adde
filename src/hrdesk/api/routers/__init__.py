"""Router registrations."""

from __future__ import annotations

from fastapi import APIRouter

from .access import router as access_router
from .admin import router as admin_router
from .auth import router as auth_router
from .comments import router as comments_router
from .health import router as health_router
from .jobs import router as jobs_router
from .notifications import router as notifications_router
from .realtime import router as realtime_router
from .tasks import router as tasks_router
from .users import router as users_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(tasks_router)
api_router.include_router(comments_router)
api_router.include_router(users_router)
api_router.include_router(notifications_router)
api_router.include_router(access_router)
api_router.include_router(admin_router)
api_router.include_router(jobs_router)
api_router.include_router(realtime_router)

__all__ = ["api_router", "health_router"]
