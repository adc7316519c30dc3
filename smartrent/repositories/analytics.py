"""
Aggregate queries behind the admin analytics dashboard.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc
from smartrent.models.listing import Listing, ListingStatus
from smartrent.models.user import User, UserRole
from typing import Optional, List, Dict, Tuple
import logging

logger = logging.getLogger(__name__)


class AnalyticsRepository:
    """Read-only aggregates over listings and users. Nothing is cached."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_totals(self) -> Dict[str, int]:
        """
        Count listings, plain users, owners and pending listings.

        The four counts are scalar subqueries of a single SELECT, so they are
        read in one round trip from one snapshot.

        Returns:
            Dictionary with keys listings, users, owners, pending_listings
        """
        try:
            query = select(
                select(func.count(Listing.id)).scalar_subquery().label("listings"),
                select(func.count(User.id))
                .where(User.role == UserRole.USER)
                .scalar_subquery().label("users"),
                select(func.count(User.id))
                .where(User.role == UserRole.OWNER)
                .scalar_subquery().label("owners"),
                select(func.count(Listing.id))
                .where(Listing.status == ListingStatus.PENDING)
                .scalar_subquery().label("pending_listings"),
            )
            row = (await self.db.execute(query)).one()

            return {
                "listings": row.listings or 0,
                "users": row.users or 0,
                "owners": row.owners or 0,
                "pending_listings": row.pending_listings or 0,
            }
        except Exception as e:
            logger.error(f"Failed to compute analytics totals: {e}")
            raise

    async def get_popular_cities(self, limit: int = 5) -> List[Tuple[str, int]]:
        """
        Cities ranked by number of verified listings.

        Ties are ordered by city name so the ranking is stable.
        """
        listing_count = func.count(Listing.id).label("count")
        result = await self.db.execute(
            select(Listing.city, listing_count)
            .where(Listing.status == ListingStatus.VERIFIED)
            .group_by(Listing.city)
            .order_by(desc(listing_count), Listing.city)
            .limit(limit)
        )
        return [(city, count) for city, count in result.all()]

    async def get_average_rent(self) -> Optional[float]:
        """Mean rent over verified listings, None when there are none."""
        result = await self.db.execute(
            select(func.avg(Listing.rent)).where(Listing.status == ListingStatus.VERIFIED)
        )
        average = result.scalar()
        return float(average) if average is not None else None

    async def get_property_type_distribution(self) -> Dict[str, int]:
        result = await self.db.execute(
            select(Listing.property_type, func.count(Listing.id))
            .where(Listing.status == ListingStatus.VERIFIED)
            .group_by(Listing.property_type)
            .order_by(Listing.property_type)
        )
        return {property_type: count for property_type, count in result.all()}
