"""API routers for the skills wallet."""

from skills_wallet.api.routers import admin_router, member_router

__all__ = [
    "member_router",
    "admin_router",
]
