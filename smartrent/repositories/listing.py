"""
Listing repository for search, owner-scoped mutation and moderation.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, desc
from smartrent.repositories.base import BaseRepository
from smartrent.models.listing import Listing, ListingStatus
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class ListingSearchFilters:
    """Data class for listing search filters."""

    def __init__(
        self,
        location: Optional[str] = None,
        min_rent: Optional[int] = None,
        max_rent: Optional[int] = None,
        property_type: Optional[str] = None,
        occupancy: Optional[str] = None,
        furnished: Optional[bool] = None,
        status: Optional[ListingStatus] = ListingStatus.VERIFIED
    ):
        self.location = location
        self.min_rent = min_rent
        self.max_rent = max_rent
        self.property_type = property_type
        self.occupancy = occupancy
        self.furnished = furnished
        self.status = status


class ListingRepository(BaseRepository[Listing]):
    """
    Repository for listings.
    Owner-scoped writes filter on both id and owner_id so a non-owner touches zero rows.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Listing, db)

    async def create_listing(self, listing_data: Dict[str, Any]) -> Listing:
        """
        Insert a listing and return it with its owner loaded.

        Args:
            listing_data: Column values, including owner_id and status

        Returns:
            Created listing
        """
        created = await self.create(listing_data)
        logger.info(f"Created listing: {created.title} (ID: {created.id}, owner: {created.owner_id})")
        return await self.get_by_id(created.id, refresh=True)

    async def get_listing(
        self,
        listing_id: uuid.UUID,
        status: Optional[ListingStatus] = None
    ) -> Optional[Listing]:
        """
        Get a listing, optionally requiring a given status.

        Args:
            listing_id: UUID of the listing
            status: When set, a listing in any other status is treated as missing

        Returns:
            Listing with owner loaded, or None
        """
        try:
            query = select(Listing).where(Listing.id == listing_id)
            if status is not None:
                query = query.where(Listing.status == status)

            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get listing {listing_id}: {e}")
            raise

    async def search_listings(
        self,
        filters: ListingSearchFilters,
        skip: int = 0,
        limit: int = 12
    ) -> List[Listing]:
        """
        Search listings with filtering and pagination, newest first.

        Args:
            filters: ListingSearchFilters instance with search criteria
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return

        Returns:
            List of listings, at most `limit` long
        """
        try:
            query = select(Listing)

            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))

            query = (
                query
                .order_by(desc(Listing.created_at), desc(Listing.id))
                .offset(skip)
                .limit(limit)
            )

            result = await self.db.execute(query)
            listings = list(result.scalars().all())

            logger.debug(f"Listing search returned {len(listings)} results (skip={skip}, limit={limit})")
            return listings
        except Exception as e:
            logger.error(f"Failed to search listings: {e}")
            raise

    def _build_filter_conditions(self, filters: ListingSearchFilters) -> List:
        """
        Build SQLAlchemy filter conditions from search filters.

        Args:
            filters: ListingSearchFilters instance

        Returns:
            List of SQLAlchemy conditions
        """
        conditions = []

        if filters.status is not None:
            conditions.append(Listing.status == filters.status)

        # Location matches city or address (case-insensitive partial match)
        if filters.location:
            pattern = f"%{filters.location}%"
            conditions.append(or_(Listing.city.ilike(pattern), Listing.address.ilike(pattern)))

        if filters.min_rent is not None:
            conditions.append(Listing.rent >= filters.min_rent)
        if filters.max_rent is not None:
            conditions.append(Listing.rent <= filters.max_rent)

        if filters.property_type:
            conditions.append(Listing.property_type == filters.property_type)

        if filters.occupancy:
            conditions.append(Listing.occupancy_preference == filters.occupancy)

        # Only an explicit request for furnished listings narrows the search
        if filters.furnished:
            conditions.append(Listing.furnished.is_(True))

        return conditions

    async def list_by_status(self, status: ListingStatus) -> List[Listing]:
        """All listings in a status, newest first."""
        result = await self.db.execute(
            select(Listing)
            .where(Listing.status == status)
            .order_by(desc(Listing.created_at), desc(Listing.id))
        )
        return list(result.scalars().all())

    async def update_owned(
        self,
        listing_id: uuid.UUID,
        owner_id: uuid.UUID,
        values: Dict[str, Any]
    ) -> Optional[Listing]:
        """
        Update a listing only if it belongs to owner_id.

        Args:
            listing_id: UUID of the listing
            owner_id: UUID the listing must belong to
            values: Column values to set

        Returns:
            Updated listing, or None when no row matched
        """
        owned = (Listing.id == listing_id, Listing.owner_id == owner_id)
        if not await self.update_where(*owned, values=values):
            logger.debug(f"No listing {listing_id} owned by {owner_id} to update")
            return None

        logger.info(f"Updated listing {listing_id}: {sorted(values)}")
        return await self.get_by_id(listing_id, refresh=True)

    async def delete_owned(self, listing_id: uuid.UUID, owner_id: uuid.UUID) -> bool:
        """
        Delete a listing only if it belongs to owner_id.

        Returns:
            True if a row was deleted
        """
        deleted = await self.delete_where(Listing.id == listing_id, Listing.owner_id == owner_id) > 0
        if deleted:
            logger.info(f"Deleted listing {listing_id}")
        else:
            logger.debug(f"No listing {listing_id} owned by {owner_id} to delete")
        return deleted

    async def set_status(self, listing_id: uuid.UUID, status: ListingStatus) -> Optional[Listing]:
        """
        Set the moderation status. No version check: the last writer wins.

        Returns:
            Updated listing, or None if it does not exist
        """
        if not await self.update_where(Listing.id == listing_id, values={"status": status}):
            return None

        logger.info(f"Listing {listing_id} status set to {status.value}")
        return await self.get_by_id(listing_id, refresh=True)
