"""
Admin service: listing moderation and dashboard analytics.
"""

from typing import List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from smartrent.repositories.analytics import AnalyticsRepository
from smartrent.repositories.listing import ListingRepository
from smartrent.models.listing import Listing, ListingStatus
from smartrent.models.user import User
from smartrent.utils.exceptions import InvalidStatusActionError, ListingNotFoundError
from smartrent.utils.permissions import Action, authorize
from smartrent.utils.stats import rounded_mean
import uuid
import logging

logger = logging.getLogger(__name__)

# Moderation action name -> resulting status
MODERATION_ACTIONS = {
    "verify": ListingStatus.VERIFIED,
    "block": ListingStatus.BLOCKED,
}

POPULAR_CITY_LIMIT = 5


class AdminService:
    """
    Moderation and analytics for admins.

    Status changes carry no version check, so concurrent moderators resolve by
    last writer wins. Nothing moves a listing back to pending.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.listing_repo = ListingRepository(db_session)
        self.analytics_repo = AnalyticsRepository(db_session)

    async def list_pending(self, current_user: User) -> List[Listing]:
        """Pending listings with owner contact, newest first."""
        authorize(current_user.role, Action.MODERATE_LISTING)
        return await self.listing_repo.list_by_status(ListingStatus.PENDING)

    async def moderate_listing(
        self,
        action: str,
        listing_id: uuid.UUID,
        current_user: User
    ) -> Listing:
        """
        Apply a moderation action to a listing.

        Args:
            action: "verify" or "block"
            listing_id: Listing to moderate
            current_user: Caller; must be an admin

        Returns:
            Listing in its new status

        Raises:
            InsufficientPermissionsError: If the caller is not an admin
            InvalidStatusActionError: If the action is not verify or block
            ListingNotFoundError: If the listing does not exist
        """
        authorize(current_user.role, Action.MODERATE_LISTING)

        status = MODERATION_ACTIONS.get(action)
        if status is None:
            raise InvalidStatusActionError(action)

        listing = await self.listing_repo.set_status(listing_id, status)
        if not listing:
            raise ListingNotFoundError()

        logger.info(f"Listing {listing_id} {status.value} by admin {current_user.email}")
        return listing

    async def get_analytics(self, current_user: User) -> Dict[str, Any]:
        """
        Dashboard figures, computed fresh on every call.

        Returns:
            Dictionary with totals, popular_cities, average_rent and property_type_distribution
        """
        authorize(current_user.role, Action.VIEW_ANALYTICS)

        totals = await self.analytics_repo.get_totals()
        cities = await self.analytics_repo.get_popular_cities(POPULAR_CITY_LIMIT)
        average_rent = await self.analytics_repo.get_average_rent()
        distribution = await self.analytics_repo.get_property_type_distribution()

        return {
            "totals": totals,
            "popular_cities": [{"city": city, "count": count} for city, count in cities],
            "average_rent": rounded_mean(average_rent),
            "property_type_distribution": distribution,
        }
