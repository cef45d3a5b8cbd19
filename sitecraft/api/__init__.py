"""API routes."""

from .projects import router as projects_router
from .published import router as published_router
from .users import router as users_router

__all__ = [
    "projects_router",
    "published_router",
    "users_router",
]
