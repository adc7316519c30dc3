"""
Pydantic schemas for the admin dashboard.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Dict


class AnalyticsTotals(BaseModel):
    """Headline counts."""

    model_config = ConfigDict(populate_by_name=True)

    listings: int = Field(..., description="All listings, any status", examples=[120])
    users: int = Field(..., description="Users with the plain user role", examples=[800])
    owners: int = Field(..., description="Users with the owner role", examples=[45])
    pending_listings: int = Field(
        ...,
        alias="pendingListings",
        description="Listings awaiting moderation",
        examples=[7]
    )


class CityCount(BaseModel):
    city: str = Field(..., examples=["Pune"])
    count: int = Field(..., examples=[31])


class AnalyticsResponse(BaseModel):
    """Dashboard aggregates, computed fresh on every request."""

    model_config = ConfigDict(populate_by_name=True)

    totals: AnalyticsTotals
    popular_cities: List[CityCount] = Field(
        ...,
        alias="popularCities",
        description="Top cities by verified listing count"
    )
    average_rent: int = Field(
        ...,
        alias="averageRent",
        description="Mean rent over verified listings, rounded; 0 when there are none",
        examples=[15500]
    )
    property_type_distribution: Dict[str, int] = Field(
        ...,
        alias="propertyTypeDistribution",
        description="Verified listing count per property type",
        examples=[{"1bhk": 12, "single": 30}]
    )
