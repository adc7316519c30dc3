"""
Favorites API endpoints.
"""

from fastapi import APIRouter, Depends, status, Path
from uuid import UUID

from smartrent.models.user import User
from smartrent.services.favorite import FavoriteService
from smartrent.schemas.favorite import (
    FavoriteResponse,
    FavoriteListResponse,
    FavoriteCreatedResponse
)
from smartrent.schemas.listing import MessageResponse
from smartrent.utils.dependencies import get_current_user, get_favorite_service
from smartrent.schemas.error import get_crud_error_responses


router = APIRouter(prefix="/favorites", tags=["Favorites"])


@router.get(
    "",
    response_model=FavoriteListResponse,
    summary="List favorites",
    description="Your saved listings, most recently added first",
    responses=get_crud_error_responses()
)
async def list_favorites(
    current_user: User = Depends(get_current_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteListResponse:
    favorites = await favorite_service.list_favorites(current_user)
    return FavoriteListResponse(
        favorites=[FavoriteResponse.model_validate(f.to_dict(include_listing=True)) for f in favorites]
    )


@router.post(
    "/{listing_id}",
    response_model=FavoriteCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add favorite",
    description="Save a verified listing",
    responses=get_crud_error_responses()
)
async def add_favorite(
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteCreatedResponse:
    favorite = await favorite_service.add_favorite(listing_id, current_user)
    return FavoriteCreatedResponse(
        message="Added to favorites",
        favorite=FavoriteResponse.model_validate(favorite.to_dict())
    )


@router.delete(
    "/{listing_id}",
    response_model=MessageResponse,
    summary="Remove favorite",
    description="Remove a saved listing. Succeeds even if it was never saved.",
    responses=get_crud_error_responses()
)
async def remove_favorite(
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> MessageResponse:
    await favorite_service.remove_favorite(listing_id, current_user)
    return MessageResponse(message="Removed from favorites")
