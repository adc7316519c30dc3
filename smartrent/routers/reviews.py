"""
Reviews API endpoints. Reviews are addressed by listing; each user has at most one per listing.
"""

from fastapi import APIRouter, Depends, status, Path
from uuid import UUID

from smartrent.models.user import User
from smartrent.services.review import ReviewService
from smartrent.schemas.review import (
    ReviewCreate,
    ReviewUpdate,
    ReviewResponse,
    ReviewListResponse,
    ReviewMutationResponse
)
from smartrent.schemas.listing import MessageResponse
from smartrent.utils.dependencies import get_current_user, get_review_service
from smartrent.schemas.error import get_crud_error_responses, get_public_error_responses


router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.get(
    "/{listing_id}",
    response_model=ReviewListResponse,
    summary="List reviews",
    description="Reviews for a listing with the average rating and total count",
    responses=get_public_error_responses()
)
async def list_reviews(
    listing_id: UUID = Path(..., description="Listing ID"),
    review_service: ReviewService = Depends(get_review_service)
) -> ReviewListResponse:
    reviews, average, total = await review_service.list_reviews(listing_id)
    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(review.to_dict()) for review in reviews],
        average_rating=average,
        total_reviews=total
    )


@router.post(
    "/{listing_id}",
    response_model=ReviewMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add review",
    description="Rate a listing from 1 to 5 with an optional comment",
    responses=get_crud_error_responses()
)
async def create_review(
    review_data: ReviewCreate,
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service)
) -> ReviewMutationResponse:
    review = await review_service.create_review(listing_id, review_data, current_user)
    return ReviewMutationResponse(
        message="Review added successfully",
        review=ReviewResponse.model_validate(review.to_dict())
    )


@router.put(
    "/{listing_id}",
    response_model=ReviewMutationResponse,
    summary="Update review",
    description="Edit your review of a listing",
    responses=get_crud_error_responses()
)
async def update_review(
    review_data: ReviewUpdate,
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service)
) -> ReviewMutationResponse:
    review = await review_service.update_review(listing_id, review_data, current_user)
    return ReviewMutationResponse(
        message="Review updated successfully",
        review=ReviewResponse.model_validate(review.to_dict())
    )


@router.delete(
    "/{listing_id}",
    response_model=MessageResponse,
    summary="Delete review",
    description="Delete your review of a listing. Succeeds even if there was none.",
    responses=get_crud_error_responses()
)
async def delete_review(
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service)
) -> MessageResponse:
    await review_service.delete_review(listing_id, current_user)
    return MessageResponse(message="Review deleted successfully")
