"""User profile and admin endpoints."""

from .router import configure_stats_router, configure_user_router

__all__ = ["configure_stats_router", "configure_user_router"]
