"""
Service layer for business logic implementation.
Contains services for listings, favorites, reviews, moderation, authentication and error handling.
"""

from .auth import AuthService
from .identity import (
    IdentityProvider,
    IdentityUser,
    IdentitySession,
    LocalIdentityProvider,
    SupabaseIdentityProvider,
    create_identity_provider
)
from .geocoding import GeocodingService
from .listing import ListingService
from .favorite import FavoriteService
from .review import ReviewService
from .admin import AdminService
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "IdentityProvider",
    "IdentityUser",
    "IdentitySession",
    "LocalIdentityProvider",
    "SupabaseIdentityProvider",
    "create_identity_provider",
    "GeocodingService",
    "ListingService",
    "FavoriteService",
    "ReviewService",
    "AdminService",
    "ErrorHandlerService"
]
