"""
Listing API endpoints: public search and detail, owner create/update/delete.
"""

from fastapi import APIRouter, Depends, status, Query, Path
from typing import Optional
from uuid import UUID

from smartrent.config import settings
from smartrent.models.user import User
from smartrent.repositories.listing import ListingSearchFilters
from smartrent.services.listing import ListingService
from smartrent.schemas.listing import (
    ListingCreate,
    ListingUpdate,
    ListingResponse,
    ListingDetailResponse,
    ListingListResponse,
    ListingEnvelope,
    ListingMutationResponse,
    PaginationInfo,
    MessageResponse
)
from smartrent.utils.dependencies import get_current_user, get_listing_service
from smartrent.schemas.error import get_crud_error_responses, get_public_error_responses


router = APIRouter(prefix="/listings", tags=["Listings"])


@router.get(
    "",
    response_model=ListingListResponse,
    status_code=status.HTTP_200_OK,
    summary="Search listings",
    description="Paginated search over verified listings, newest first",
    responses=get_public_error_responses()
)
async def search_listings(
    location: Optional[str] = Query(None, description="Case-insensitive match on city or address"),
    min_price: Optional[int] = Query(None, alias="minPrice", ge=0, description="Minimum monthly rent"),
    max_price: Optional[int] = Query(None, alias="maxPrice", ge=0, description="Maximum monthly rent"),
    property_type: Optional[str] = Query(None, alias="propertyType", description="Exact property type"),
    occupancy: Optional[str] = Query(None, description="Exact occupancy preference"),
    furnished: Optional[bool] = Query(None, description="true restricts to furnished listings"),
    page: int = Query(1, ge=1, description="Page number (starts from 1)"),
    limit: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Number of listings per page"
    ),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingListResponse:
    """
    Search verified listings.

    has_more is true whenever the page came back full; there is no total count.
    """
    filters = ListingSearchFilters(
        location=location,
        min_rent=min_price,
        max_rent=max_price,
        property_type=property_type,
        occupancy=occupancy,
        furnished=furnished
    )

    listings, has_more = await listing_service.search_listings(filters, page=page, limit=limit)

    return ListingListResponse(
        listings=[ListingResponse.model_validate(listing.to_dict(include_owner=True)) for listing in listings],
        pagination=PaginationInfo(page=page, limit=limit, has_more=has_more)
    )


@router.get(
    "/{listing_id}",
    response_model=ListingEnvelope,
    status_code=status.HTTP_200_OK,
    summary="Get listing",
    description="Verified listing with owner contact, reviews and average rating",
    responses=get_public_error_responses()
)
async def get_listing(
    listing_id: UUID = Path(..., description="Listing ID"),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingEnvelope:
    detail = await listing_service.get_listing(listing_id)
    return ListingEnvelope(listing=ListingDetailResponse.model_validate(detail))


@router.post(
    "",
    response_model=ListingMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create listing",
    description="Create a listing in pending status. Requires owner or admin role.",
    responses=get_crud_error_responses()
)
async def create_listing(
    listing_data: ListingCreate,
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingMutationResponse:
    """
    Create a new listing.

    Args:
        listing_data: Listing payload; status, owner and coordinates are not accepted
        current_user: Current authenticated user
        listing_service: Listing service instance

    Returns:
        Created listing

    Raises:
        InsufficientPermissionsError: If the caller is not an owner or admin
    """
    listing = await listing_service.create_listing(listing_data, current_user)

    return ListingMutationResponse(
        message="Listing created successfully",
        listing=ListingResponse.model_validate(listing.to_dict(include_owner=True))
    )


@router.put(
    "/{listing_id}",
    response_model=ListingMutationResponse,
    status_code=status.HTTP_200_OK,
    summary="Update listing",
    description="Update your own listing. Only fields present in the body change.",
    responses=get_crud_error_responses()
)
async def update_listing(
    listing_data: ListingUpdate,
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingMutationResponse:
    listing = await listing_service.update_listing(listing_id, listing_data, current_user)

    return ListingMutationResponse(
        message="Listing updated successfully",
        listing=ListingResponse.model_validate(listing.to_dict(include_owner=True))
    )


@router.delete(
    "/{listing_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete listing",
    description="Delete your own listing along with its favorites and reviews",
    responses=get_crud_error_responses()
)
async def delete_listing(
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> MessageResponse:
    await listing_service.delete_listing(listing_id, current_user)
    return MessageResponse(message="Listing deleted successfully")
