"""Aggregate all v1 routers."""
from fastapi import APIRouter

from .routers.admin import router as admin_router
from .routers.auth import router as auth_router
from .routers.links import router as links_router
from .routers.profiles import router as profiles_router
from .routers.usernames import router as usernames_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(auth_router)
v1_router.include_router(usernames_router)
v1_router.include_router(profiles_router)
v1_router.include_router(links_router)
v1_router.include_router(admin_router)
