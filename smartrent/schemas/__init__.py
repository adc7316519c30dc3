"""
Pydantic schemas for request/response validation.
"""

# Authentication schemas
from .auth import (
    SignupRequest,
    LoginRequest,
    RefreshTokenRequest,
    SessionResponse,
    SignupResponse,
    LoginResponse,
    CurrentUserResponse
)

# User schemas
from .user import (
    OwnerContact,
    UserResponse
)

# Listing schemas
from .listing import (
    ListingBase,
    ListingCreate,
    ListingUpdate,
    ListingResponse,
    ListingDetailResponse,
    PaginationInfo,
    ListingListResponse,
    ListingEnvelope,
    ListingMutationResponse,
    PendingListingsResponse,
    MessageResponse
)

# Favorite schemas
from .favorite import (
    FavoriteResponse,
    FavoriteListResponse,
    FavoriteCreatedResponse
)

# Review schemas
from .review import (
    ReviewCreate,
    ReviewUpdate,
    ReviewResponse,
    ReviewListResponse,
    ReviewMutationResponse
)

# Admin schemas
from .admin import (
    AnalyticsTotals,
    CityCount,
    AnalyticsResponse
)

__all__ = [
    # Authentication
    "SignupRequest",
    "LoginRequest",
    "RefreshTokenRequest",
    "SessionResponse",
    "SignupResponse",
    "LoginResponse",
    "CurrentUserResponse",

    # User
    "OwnerContact",
    "UserResponse",

    # Listing
    "ListingBase",
    "ListingCreate",
    "ListingUpdate",
    "ListingResponse",
    "ListingDetailResponse",
    "PaginationInfo",
    "ListingListResponse",
    "ListingEnvelope",
    "ListingMutationResponse",
    "PendingListingsResponse",
    "MessageResponse",

    # Favorite
    "FavoriteResponse",
    "FavoriteListResponse",
    "FavoriteCreatedResponse",

    # Review
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "ReviewListResponse",
    "ReviewMutationResponse",

    # Admin
    "AnalyticsTotals",
    "CityCount",
    "AnalyticsResponse"
]
