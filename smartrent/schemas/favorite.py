"""
Pydantic schemas for favorites.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from smartrent.schemas.listing import ListingResponse
import uuid


class FavoriteResponse(BaseModel):
    """A saved listing, with the listing and its owner's contact summary."""

    id: uuid.UUID
    user_id: uuid.UUID
    listing_id: uuid.UUID
    created_at: datetime
    listing: Optional[ListingResponse] = Field(
        None,
        description="Saved listing with owner contact"
    )


class FavoriteListResponse(BaseModel):
    favorites: List[FavoriteResponse] = Field(..., description="Favorites, most recently added first")


class FavoriteCreatedResponse(BaseModel):
    message: str = Field(..., examples=["Added to favorites"])
    favorite: FavoriteResponse
