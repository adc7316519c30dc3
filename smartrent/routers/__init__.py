"""
API route handlers for the SmartRent API.
Provides organized routing for different API endpoints.
"""

from .auth import router as auth_router
from .listings import router as listings_router
from .favorites import router as favorites_router
from .reviews import router as reviews_router
from .admin import router as admin_router

__all__ = [
    "auth_router",
    "listings_router",
    "favorites_router",
    "reviews_router",
    "admin_router"
]
