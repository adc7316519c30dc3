"""
Reviews service: one rating per user per listing.
"""

from typing import List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from smartrent.repositories.base import is_unique_violation
from smartrent.repositories.listing import ListingRepository
from smartrent.repositories.review import ReviewRepository
from smartrent.models.review import Review
from smartrent.models.user import User
from smartrent.schemas.review import ReviewCreate, ReviewUpdate
from smartrent.utils.exceptions import (
    DuplicateResourceError,
    ListingNotFoundError,
    NotFoundError,
    ValidationError
)
from smartrent.utils.permissions import Action, authorize
from smartrent.utils.stats import average_rating
import uuid
import logging

logger = logging.getLogger(__name__)


class ReviewService:
    """
    Reviews service.
    Edits and deletes are keyed on (caller, listing), so nobody can touch another user's review.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.review_repo = ReviewRepository(db_session)
        self.listing_repo = ListingRepository(db_session)

    async def list_reviews(self, listing_id: uuid.UUID) -> Tuple[List[Review], float, int]:
        """
        Reviews for a listing, newest first.

        Returns:
            Tuple of (reviews, average rating to one decimal, total count)
        """
        reviews = await self.review_repo.list_for_listing(listing_id)
        return reviews, average_rating(review.rating for review in reviews), len(reviews)

    async def create_review(
        self,
        listing_id: uuid.UUID,
        review_data: ReviewCreate,
        current_user: User
    ) -> Review:
        """
        Review a listing. The listing must exist; its status does not matter.

        Raises:
            ListingNotFoundError: If the listing does not exist
            DuplicateResourceError: If the caller already reviewed the listing
        """
        authorize(current_user.role, Action.WRITE_REVIEW)

        listing = await self.listing_repo.get_by_id(listing_id)
        if not listing:
            raise ListingNotFoundError()

        try:
            review = await self.review_repo.create_review(
                user_id=current_user.id,
                listing_id=listing_id,
                rating=review_data.rating,
                comment=review_data.comment or None
            )
        except IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateResourceError("You have already reviewed this listing")
            raise

        return review

    async def update_review(
        self,
        listing_id: uuid.UUID,
        review_data: ReviewUpdate,
        current_user: User
    ) -> Review:
        """
        Edit the caller's review of a listing.

        An omitted comment is kept; a null or empty comment is cleared.

        Raises:
            ValidationError: If the payload has no fields
            NotFoundError: If the caller has not reviewed the listing
        """
        authorize(current_user.role, Action.WRITE_REVIEW)

        update_data = review_data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationError("No valid fields provided for update")

        if "comment" in update_data:
            update_data["comment"] = update_data["comment"] or None

        review = await self.review_repo.update_owned(current_user.id, listing_id, update_data)
        if not review:
            raise NotFoundError("Review", detail="Review not found")

        return review

    async def delete_review(self, listing_id: uuid.UUID, current_user: User) -> None:
        """Delete the caller's review of a listing. Deleting a missing review is not an error."""
        authorize(current_user.role, Action.WRITE_REVIEW)

        deleted = await self.review_repo.delete_owned(current_user.id, listing_id)
        if deleted:
            logger.info(f"User {current_user.id} deleted review of listing {listing_id}")
