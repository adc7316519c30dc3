"""
Database models for the SmartRent API.
Includes User, Credential, Listing, Favorite and Review models.
"""

from smartrent.models.user import User, UserRole
from smartrent.models.credential import Credential
from smartrent.models.listing import Listing, ListingStatus
from smartrent.models.favorite import Favorite
from smartrent.models.review import Review

# Export all models for easy importing
__all__ = [
    "User",
    "UserRole",
    "Credential",
    "Listing",
    "ListingStatus",
    "Favorite",
    "Review",
]
