"""
Repository layer for data access operations.
One repository per table, plus read-only aggregates for the admin dashboard.
"""

from smartrent.repositories.base import BaseRepository, is_unique_violation
from smartrent.repositories.user import UserRepository
from smartrent.repositories.credential import CredentialRepository
from smartrent.repositories.listing import ListingRepository, ListingSearchFilters
from smartrent.repositories.favorite import FavoriteRepository
from smartrent.repositories.review import ReviewRepository
from smartrent.repositories.analytics import AnalyticsRepository

__all__ = [
    "BaseRepository",
    "is_unique_violation",
    "UserRepository",
    "CredentialRepository",
    "ListingRepository",
    "ListingSearchFilters",
    "FavoriteRepository",
    "ReviewRepository",
    "AnalyticsRepository"
]
