"""
Review repository: ratings and comments on listings.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from smartrent.repositories.base import BaseRepository
from smartrent.models.review import Review
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class ReviewRepository(BaseRepository[Review]):
    """
    Repository for reviews.
    Update and delete are keyed on (user_id, listing_id), so only the author can touch a review.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Review, db)

    async def list_for_listing(self, listing_id: uuid.UUID) -> List[Review]:
        """Reviews on a listing with reviewer loaded, newest first."""
        try:
            result = await self.db.execute(
                select(Review)
                .where(Review.listing_id == listing_id)
                .order_by(desc(Review.created_at), desc(Review.id))
            )
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to list reviews for listing {listing_id}: {e}")
            raise

    async def create_review(
        self,
        user_id: uuid.UUID,
        listing_id: uuid.UUID,
        rating: int,
        comment: Optional[str] = None
    ) -> Review:
        """
        Store a review.

        Raises:
            IntegrityError: If the user already reviewed the listing
        """
        created = await self.create({
            "user_id": user_id,
            "listing_id": listing_id,
            "rating": rating,
            "comment": comment,
        })
        logger.info(f"User {user_id} reviewed listing {listing_id} with rating {rating}")
        return await self.get_by_id(created.id, refresh=True)

    async def update_owned(
        self,
        user_id: uuid.UUID,
        listing_id: uuid.UUID,
        values: Dict[str, Any]
    ) -> Optional[Review]:
        """
        Update the caller's own review of a listing.

        Returns:
            Updated review, or None when the user has not reviewed the listing
        """
        authored = (Review.user_id == user_id, Review.listing_id == listing_id)
        if not await self.update_where(*authored, values=values):
            return None

        logger.info(f"User {user_id} updated review of listing {listing_id}")
        result = await self.db.execute(
            select(Review).where(*authored).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def delete_owned(self, user_id: uuid.UUID, listing_id: uuid.UUID) -> bool:
        """True if the caller had a review of the listing and it was deleted."""
        deleted = await self.delete_where(Review.user_id == user_id, Review.listing_id == listing_id)
        if deleted:
            logger.info(f"User {user_id} deleted review of listing {listing_id}")
        return deleted > 0
