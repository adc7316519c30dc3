"""
Pydantic schemas for listing requests and responses.
Handles listing CRUD payloads, search pagination and validation.

Fields such as status, owner_id, latitude and longitude are not part of the
request schemas, so client-supplied values are dropped before they reach a service.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime
from smartrent.models.listing import ListingStatus
from smartrent.schemas.user import OwnerContact
from smartrent.schemas.review import ReviewResponse
import uuid


def _clean_required_text(v: Optional[str], field: str) -> Optional[str]:
    if v is None:
        return v
    if not v.strip():
        raise ValueError(f"{field} cannot be empty")
    return v.strip()


class ListingBase(BaseModel):
    """Base listing schema with common fields."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Listing title",
        examples=["Sunny 1BHK near the university"]
    )

    description: Optional[str] = Field(
        None,
        max_length=5000,
        description="Free-text property description"
    )

    address: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Street address, geocoded into coordinates",
        examples=["12 MG Road, Indiranagar"]
    )

    city: str = Field(
        ...,
        min_length=1,
        max_length=120,
        description="City",
        examples=["Bengaluru"]
    )

    rent: int = Field(
        ...,
        ge=0,
        description="Monthly rent in whole currency units",
        examples=[18000]
    )

    deposit: Optional[int] = Field(
        None,
        ge=0,
        description="Security deposit",
        examples=[50000]
    )

    property_type: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Property type, e.g. single, double, 1bhk",
        examples=["1bhk"]
    )

    occupancy_preference: Optional[str] = Field(
        None,
        max_length=50,
        description="Preferred occupants, e.g. students, family",
        examples=["students"]
    )

    furnished: bool = Field(
        False,
        description="Whether the property is furnished"
    )

    bedrooms: Optional[int] = Field(None, ge=0, le=50, description="Number of bedrooms")
    bathrooms: Optional[int] = Field(None, ge=0, le=50, description="Number of bathrooms")
    area_sqft: Optional[int] = Field(None, gt=0, le=1000000, description="Area in square feet")

    amenities: List[str] = Field(
        default_factory=list,
        description="Amenity tags",
        examples=[["wifi", "parking"]]
    )

    @field_validator('title', 'address', 'city', 'property_type')
    @classmethod
    def validate_required_text(cls, v, info):
        """Strip required text fields and reject blanks."""
        return _clean_required_text(v, info.field_name)


class ListingCreate(ListingBase):
    """Schema for creating a listing. The listing always starts pending."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Sunny 1BHK near the university",
                "description": "Bright flat on the second floor with a balcony.",
                "address": "12 MG Road, Indiranagar",
                "city": "Bengaluru",
                "rent": 18000,
                "deposit": 50000,
                "property_type": "1bhk",
                "occupancy_preference": "students",
                "furnished": True,
                "amenities": ["wifi", "parking"]
            }
        }
    )


class ListingUpdate(BaseModel):
    """Schema for partially updating a listing. Only fields present in the body change."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    address: Optional[str] = Field(None, min_length=1, max_length=500)
    city: Optional[str] = Field(None, min_length=1, max_length=120)
    rent: Optional[int] = Field(None, ge=0)
    deposit: Optional[int] = Field(None, ge=0)
    property_type: Optional[str] = Field(None, min_length=1, max_length=50)
    occupancy_preference: Optional[str] = Field(None, max_length=50)
    furnished: Optional[bool] = None
    bedrooms: Optional[int] = Field(None, ge=0, le=50)
    bathrooms: Optional[int] = Field(None, ge=0, le=50)
    area_sqft: Optional[int] = Field(None, gt=0, le=1000000)
    amenities: Optional[List[str]] = None

    @field_validator('title', 'address', 'city', 'property_type')
    @classmethod
    def validate_required_text(cls, v, info):
        """Strip required text fields and reject blanks."""
        return _clean_required_text(v, info.field_name)

    @model_validator(mode='after')
    def validate_required_not_null(self):
        """Columns that are required on create cannot be nulled by an update."""
        for field in ("title", "address", "city", "rent", "property_type", "furnished", "amenities"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "rent": 19500,
                "furnished": True
            }
        }
    )


class ListingResponse(BaseModel):
    """Listing as returned by the API."""

    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    description: Optional[str] = None
    address: str
    city: str
    rent: int
    deposit: Optional[int] = None
    property_type: str
    occupancy_preference: Optional[str] = None
    furnished: bool
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    area_sqft: Optional[int] = None
    amenities: List[str] = Field(default_factory=list)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: ListingStatus
    created_at: datetime
    updated_at: datetime

    owner: Optional[OwnerContact] = Field(
        None,
        description="Owner contact summary (if included)"
    )


class ListingDetailResponse(ListingResponse):
    """Single listing with its reviews and derived rating."""

    reviews: List[ReviewResponse] = Field(default_factory=list)
    average_rating: float = Field(0, examples=[4.5])
    total_reviews: int = Field(0, examples=[2])


class PaginationInfo(BaseModel):
    """Offset pagination without a total count."""

    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(..., examples=[1])
    limit: int = Field(..., examples=[12])
    has_more: bool = Field(
        ...,
        alias="hasMore",
        description="True when this page came back full"
    )


class ListingListResponse(BaseModel):
    """Schema for a page of search results."""

    listings: List[ListingResponse] = Field(..., description="Listings, newest first")
    pagination: PaginationInfo


class ListingEnvelope(BaseModel):
    listing: ListingDetailResponse


class ListingMutationResponse(BaseModel):
    message: str = Field(..., examples=["Listing created successfully"])
    listing: ListingResponse


class PendingListingsResponse(BaseModel):
    listings: List[ListingResponse]


class MessageResponse(BaseModel):
    message: str
