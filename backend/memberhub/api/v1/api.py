"""API routes for the FastAPI application."""

from memberhub.api.router import TrailingSlashRouter
from memberhub.api.v1.endpoints import auth, health, invitations, organizations, users

api_router = TrailingSlashRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(organizations.router, prefix="/organizations", tags=["organizations"])
api_router.include_router(invitations.router, prefix="/invitations", tags=["invitations"])
