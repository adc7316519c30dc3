"""
FastAPI dependency injection utilities for authentication and database sessions.
Provides service factories and bearer-token resolution for route protection.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from smartrent.database import get_db
from smartrent.models.user import User
from smartrent.services.auth import AuthService
from smartrent.services.identity import IdentityProvider, create_identity_provider
from smartrent.services.geocoding import GeocodingService
from smartrent.services.listing import ListingService
from smartrent.services.favorite import FavoriteService
from smartrent.services.review import ReviewService
from smartrent.services.admin import AdminService
from smartrent.utils.exceptions import UnauthorizedError
from smartrent.utils.permissions import Action, authorize


# HTTP Bearer token security scheme; missing credentials are reported by get_current_user
security = HTTPBearer(auto_error=False)


async def get_identity_provider(db: AsyncSession = Depends(get_db)) -> IdentityProvider:
    """
    Get the identity provider selected by IDENTITY_PROVIDER.

    Args:
        db: Database session (used by the built-in provider's credential store)

    Returns:
        IdentityProvider instance
    """
    return create_identity_provider(db)


def get_geocoder() -> GeocodingService:
    return GeocodingService()


async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    identity_provider: IdentityProvider = Depends(get_identity_provider)
) -> AuthService:
    """
    Get authentication service instance.

    Args:
        db: Database session
        identity_provider: Provider for credentials and tokens

    Returns:
        AuthService instance
    """
    return AuthService(db, identity_provider)


async def get_listing_service(
    db: AsyncSession = Depends(get_db),
    geocoder: GeocodingService = Depends(get_geocoder)
) -> ListingService:
    return ListingService(db, geocoder)


async def get_favorite_service(db: AsyncSession = Depends(get_db)) -> FavoriteService:
    return FavoriteService(db)


async def get_review_service(db: AsyncSession = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


async def get_admin_service(db: AsyncSession = Depends(get_db)) -> AdminService:
    return AdminService(db)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from the bearer token.

    The role on the returned user is read from the users table on every request.

    Args:
        credentials: HTTP Bearer credentials
        auth_service: Authentication service

    Returns:
        Current User object

    Raises:
        UnauthorizedError: If no bearer token was sent or it has no profile
        InvalidTokenError: If the identity provider rejects the token
    """
    if not credentials or not credentials.credentials:
        raise UnauthorizedError("Authorization required")

    return await auth_service.get_current_user(credentials.credentials)


async def get_current_admin_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current user with admin role.

    Args:
        current_user: Current user

    Returns:
        Admin User object

    Raises:
        InsufficientPermissionsError: If user is not an admin
    """
    authorize(current_user.role, Action.MODERATE_LISTING)
    return current_user
