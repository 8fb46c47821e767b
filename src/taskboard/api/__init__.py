"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Unlike a blanket router-level auth dependency, each route declares
require_auth or require_admin itself, because most resources mix
user-readable and admin-only operations. Health and the auth routes
(except /auth/me) are open.
"""

from fastapi import APIRouter

from taskboard.api.auth import router as auth_router
from taskboard.api.categories import router as categories_router
from taskboard.api.dashboard import router as dashboard_router
from taskboard.api.health import router as health_router
from taskboard.api.todos import router as todos_router
from taskboard.api.users import router as users_router

api_router = APIRouter(prefix="/api")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(todos_router, tags=["todos"])
api_router.include_router(categories_router, tags=["categories"])
api_router.include_router(users_router, tags=["users"])
api_router.include_router(dashboard_router, tags=["dashboard"])
