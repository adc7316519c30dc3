"""
Pydantic schemas for review requests and responses.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List
from datetime import datetime
from smartrent.models.review import MIN_RATING, MAX_RATING
import uuid


class ReviewCreate(BaseModel):
    """Schema for reviewing a listing."""

    rating: int = Field(
        ...,
        ge=MIN_RATING,
        le=MAX_RATING,
        strict=True,
        description="Whole-number rating from 1 to 5",
        examples=[4]
    )
    comment: Optional[str] = Field(
        None,
        max_length=2000,
        description="Optional free-text comment",
        examples=["Clean rooms and a responsive owner."]
    )


class ReviewUpdate(BaseModel):
    """
    Schema for editing a review.

    Omitted fields are left unchanged; a null or empty comment clears it.
    """

    rating: Optional[int] = Field(
        None,
        ge=MIN_RATING,
        le=MAX_RATING,
        strict=True,
        description="Whole-number rating from 1 to 5"
    )
    comment: Optional[str] = Field(
        None,
        max_length=2000,
        description="Replacement comment; null or empty clears it"
    )

    @model_validator(mode='after')
    def validate_rating_not_null(self):
        """A review always has a rating, so it cannot be set to null."""
        if "rating" in self.model_fields_set and self.rating is None:
            raise ValueError("Rating cannot be null")
        return self


class ReviewResponse(BaseModel):
    """Review with the reviewer's display name."""

    id: uuid.UUID
    user_id: uuid.UUID
    listing_id: uuid.UUID
    rating: int = Field(..., examples=[4])
    comment: Optional[str] = None
    reviewer_name: Optional[str] = Field(None, examples=["Arjun Mehta"])
    created_at: datetime
    updated_at: datetime


class ReviewListResponse(BaseModel):
    """Reviews on a listing with the derived average."""

    model_config = ConfigDict(populate_by_name=True)

    reviews: List[ReviewResponse] = Field(..., description="Reviews, newest first")
    average_rating: float = Field(
        ...,
        alias="averageRating",
        description="Mean rating rounded to one decimal, 0 when there are no reviews",
        examples=[4.3]
    )
    total_reviews: int = Field(..., alias="totalReviews", examples=[12])


class ReviewMutationResponse(BaseModel):
    message: str = Field(..., examples=["Review added successfully"])
    review: ReviewResponse
