"""
Favorite repository: a user's saved listings.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from smartrent.repositories.base import BaseRepository
from smartrent.models.favorite import Favorite
from typing import List
import uuid
import logging

logger = logging.getLogger(__name__)


class FavoriteRepository(BaseRepository[Favorite]):
    """Repository for favorites. The (user, listing) pair is unique at the database level."""

    def __init__(self, db: AsyncSession):
        super().__init__(Favorite, db)

    async def list_for_user(self, user_id: uuid.UUID) -> List[Favorite]:
        """
        Get a user's favorites with their listings, most recently added first.

        Args:
            user_id: UUID of the user

        Returns:
            List of favorites
        """
        try:
            result = await self.db.execute(
                select(Favorite)
                .where(Favorite.user_id == user_id)
                .order_by(desc(Favorite.created_at), desc(Favorite.id))
            )
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list favorites for user {user_id}: {e}")
            raise

    async def add(self, user_id: uuid.UUID, listing_id: uuid.UUID) -> Favorite:
        """
        Save a listing for a user.

        Raises:
            IntegrityError: If the pair already exists
        """
        favorite = await self.create({"user_id": user_id, "listing_id": listing_id})
        logger.info(f"User {user_id} favorited listing {listing_id}")
        return favorite

    async def remove(self, user_id: uuid.UUID, listing_id: uuid.UUID) -> bool:
        """
        Remove a saved listing.

        Returns:
            True if a row was deleted, False if there was nothing to remove
        """
        return await self.delete_where(Favorite.user_id == user_id, Favorite.listing_id == listing_id) > 0
