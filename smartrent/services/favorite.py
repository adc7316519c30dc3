"""
Favorites service: a user's saved listings.
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from smartrent.repositories.base import is_unique_violation
from smartrent.repositories.favorite import FavoriteRepository
from smartrent.repositories.listing import ListingRepository
from smartrent.models.favorite import Favorite
from smartrent.models.listing import ListingStatus
from smartrent.models.user import User
from smartrent.utils.exceptions import DuplicateResourceError, ListingNotFoundError
from smartrent.utils.permissions import Action, authorize
import uuid
import logging

logger = logging.getLogger(__name__)


class FavoriteService:
    """Add, list and remove favorites. Only verified listings can be saved."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.favorite_repo = FavoriteRepository(db_session)
        self.listing_repo = ListingRepository(db_session)

    async def list_favorites(self, current_user: User) -> List[Favorite]:
        authorize(current_user.role, Action.MANAGE_FAVORITES)
        return await self.favorite_repo.list_for_user(current_user.id)

    async def add_favorite(self, listing_id: uuid.UUID, current_user: User) -> Favorite:
        """
        Save a verified listing for the caller.

        The unique constraint on (user, listing) decides races between concurrent adds.

        Raises:
            ListingNotFoundError: If the listing is missing or not verified
            DuplicateResourceError: If the listing is already saved
        """
        authorize(current_user.role, Action.MANAGE_FAVORITES)

        listing = await self.listing_repo.get_listing(listing_id, status=ListingStatus.VERIFIED)
        if not listing:
            raise ListingNotFoundError(detail="Listing not found or not verified")

        try:
            favorite = await self.favorite_repo.add(current_user.id, listing_id)
        except IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateResourceError("Already in favorites")
            raise

        return favorite

    async def remove_favorite(self, listing_id: uuid.UUID, current_user: User) -> None:
        """Remove a saved listing. Removing one that was never saved is not an error."""
        authorize(current_user.role, Action.MANAGE_FAVORITES)

        removed = await self.favorite_repo.remove(current_user.id, listing_id)
        if removed:
            logger.info(f"User {current_user.id} removed listing {listing_id} from favorites")
        else:
            logger.debug(f"Listing {listing_id} was not in favorites of user {current_user.id}")
