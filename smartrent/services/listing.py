"""
Listing service: public search and detail, and owner-scoped mutation.
"""

from typing import Optional, List, Dict, Any, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from smartrent.repositories.listing import ListingRepository, ListingSearchFilters
from smartrent.repositories.review import ReviewRepository
from smartrent.models.listing import Listing, ListingStatus
from smartrent.models.user import User
from smartrent.schemas.listing import ListingCreate, ListingUpdate
from smartrent.services.geocoding import GeocodingService
from smartrent.utils.exceptions import ListingNotFoundError, ValidationError
from smartrent.utils.permissions import Action, authorize
from smartrent.utils.stats import average_rating
import uuid
import logging

logger = logging.getLogger(__name__)


class ListingService:
    """
    Listing service covering the public query surface and owner mutations.

    Mutations never trust client-supplied status, owner or coordinates: new
    listings start pending and belong to the caller, and coordinates only come
    from the geocoder.
    """

    def __init__(self, db_session: AsyncSession, geocoder: Optional[GeocodingService] = None):
        self.db = db_session
        self.listing_repo = ListingRepository(db_session)
        self.review_repo = ReviewRepository(db_session)
        self.geocoder = geocoder or GeocodingService()

    async def search_listings(
        self,
        filters: ListingSearchFilters,
        page: int = 1,
        limit: int = 12
    ) -> Tuple[List[Listing], bool]:
        """
        Search verified listings, newest first.

        Args:
            filters: Search criteria; the status is always forced to verified
            page: 1-based page number
            limit: Page size

        Returns:
            Tuple of (listings, has_more). has_more is True when the page came back full.

        Raises:
            ValidationError: If page or limit is out of range
        """
        if page < 1:
            raise ValidationError("Page must be at least 1")
        if limit < 1:
            raise ValidationError("Limit must be at least 1")

        filters.status = ListingStatus.VERIFIED
        skip = (page - 1) * limit

        listings = await self.listing_repo.search_listings(filters, skip=skip, limit=limit)
        return listings, len(listings) == limit

    async def get_listing(self, listing_id: uuid.UUID) -> Dict[str, Any]:
        """
        Get a verified listing with owner contact, reviews and rating summary.

        A pending or blocked listing is reported as missing, even to its owner.

        Raises:
            ListingNotFoundError: If no verified listing has this id
        """
        listing = await self.listing_repo.get_listing(listing_id, status=ListingStatus.VERIFIED)
        if not listing:
            raise ListingNotFoundError()

        reviews = await self.review_repo.list_for_listing(listing_id)

        detail = listing.to_dict(include_owner=True)
        detail["reviews"] = [review.to_dict() for review in reviews]
        detail["average_rating"] = average_rating(review.rating for review in reviews)
        detail["total_reviews"] = len(reviews)

        logger.debug(f"Retrieved listing {listing_id} with {len(reviews)} reviews")
        return detail

    async def create_listing(self, listing_data: ListingCreate, current_user: User) -> Listing:
        """
        Create a listing owned by the caller, in pending status.

        Args:
            listing_data: Validated listing payload
            current_user: Caller; must be an owner or admin

        Returns:
            Created listing

        Raises:
            InsufficientPermissionsError: If the caller's role cannot create listings
        """
        authorize(current_user.role, Action.CREATE_LISTING)

        create_data = listing_data.model_dump()
        create_data["owner_id"] = current_user.id
        create_data["status"] = ListingStatus.PENDING
        create_data["latitude"], create_data["longitude"] = await self._locate(create_data.get("address"))

        listing = await self.listing_repo.create_listing(create_data)
        logger.info(f"Listing created by {current_user.email}: {listing.title} (ID: {listing.id})")
        return listing

    async def update_listing(
        self,
        listing_id: uuid.UUID,
        listing_data: ListingUpdate,
        current_user: User
    ) -> Listing:
        """
        Update the caller's own listing with the fields present in the payload.

        The status is left as it is.

        Raises:
            ValidationError: If the payload has no fields
            ListingNotFoundError: If the listing does not exist or belongs to someone else
        """
        authorize(current_user.role, Action.UPDATE_LISTING)

        update_data = listing_data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationError("No valid fields provided for update")

        if "address" in update_data:
            coordinates = await self._locate(update_data["address"])
            if coordinates != (None, None):
                update_data["latitude"], update_data["longitude"] = coordinates

        listing = await self.listing_repo.update_owned(listing_id, current_user.id, update_data)
        if not listing:
            raise ListingNotFoundError()

        logger.info(f"Listing {listing_id} updated by {current_user.email}: {sorted(update_data)}")
        return listing

    async def delete_listing(self, listing_id: uuid.UUID, current_user: User) -> None:
        """
        Delete the caller's own listing. Favorites and reviews go with it.

        Raises:
            ListingNotFoundError: If the listing does not exist or belongs to someone else
        """
        authorize(current_user.role, Action.DELETE_LISTING)

        deleted = await self.listing_repo.delete_owned(listing_id, current_user.id)
        if not deleted:
            raise ListingNotFoundError()

        logger.info(f"Listing {listing_id} deleted by {current_user.email}")

    async def _locate(self, address: Optional[str]) -> Tuple[Optional[float], Optional[float]]:
        coordinates = await self.geocoder.geocode(address)
        if coordinates is None:
            return None, None
        return coordinates
