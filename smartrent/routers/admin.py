"""
Admin API endpoints: moderation queue, verify/block and analytics.
All routes require the admin role, read fresh from the users table.
"""

from fastapi import APIRouter, Depends, Path

from uuid import UUID

from smartrent.models.user import User
from smartrent.services.admin import AdminService
from smartrent.schemas.admin import AnalyticsResponse
from smartrent.schemas.listing import (
    ListingResponse,
    ListingMutationResponse,
    PendingListingsResponse
)
from smartrent.utils.dependencies import get_current_admin_user, get_admin_service
from smartrent.schemas.error import get_crud_error_responses


router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get(
    "/listings/pending",
    response_model=PendingListingsResponse,
    summary="Pending listings",
    description="Listings awaiting moderation, newest first",
    responses=get_crud_error_responses()
)
async def list_pending_listings(
    current_user: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> PendingListingsResponse:
    listings = await admin_service.list_pending(current_user)
    return PendingListingsResponse(
        listings=[ListingResponse.model_validate(listing.to_dict(include_owner=True)) for listing in listings]
    )


@router.put(
    "/listings/{action}/{listing_id}",
    response_model=ListingMutationResponse,
    summary="Moderate listing",
    description="Verify or block a listing",
    responses=get_crud_error_responses()
)
async def moderate_listing(
    action: str = Path(..., description="verify or block"),
    listing_id: UUID = Path(..., description="Listing ID"),
    current_user: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> ListingMutationResponse:
    """
    Apply a moderation action.

    Raises:
        InvalidStatusActionError: If action is neither verify nor block
        ListingNotFoundError: If the listing does not exist
    """
    listing = await admin_service.moderate_listing(action, listing_id, current_user)
    return ListingMutationResponse(
        message=f"Listing {listing.status.value} successfully",
        listing=ListingResponse.model_validate(listing.to_dict(include_owner=True))
    )


@router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    summary="Dashboard analytics",
    description="Totals, popular cities, average rent and property type distribution",
    responses=get_crud_error_responses()
)
async def get_analytics(
    current_user: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> AnalyticsResponse:
    analytics = await admin_service.get_analytics(current_user)
    return AnalyticsResponse.model_validate(analytics)
