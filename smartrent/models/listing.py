"""
Listing model for rental properties.
Handles property data, location, pricing, moderation status and owner relationship.
"""

from sqlalchemy import (
    String, Text, Integer, Float, Boolean, JSON, Enum as SQLEnum, Index, ForeignKey, Uuid,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from smartrent.database import Base
import enum
import uuid
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from smartrent.models.user import User


class ListingStatus(str, enum.Enum):
    """Moderation status. New listings start pending; only admins move them on."""
    PENDING = "pending"
    VERIFIED = "verified"
    BLOCKED = "blocked"


class Listing(Base):
    """
    Rentable property record owned by a user with the owner role.
    Only verified listings are visible publicly or can be favorited.
    """

    __tablename__ = "listings"

    __table_args__ = (
        CheckConstraint("rent >= 0", name="ck_listings_rent_non_negative"),
    )

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the owner who created this listing"
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Listing title"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Free-text property description"
    )

    address: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        comment="Street address, geocoded into coordinates"
    )

    city: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
        index=True,
    )

    rent: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="Monthly rent in whole currency units"
    )

    deposit: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Security deposit"
    )

    property_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="Property type, e.g. single, double, 1bhk"
    )

    occupancy_preference: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
        comment="Preferred occupants, e.g. students, family"
    )

    furnished: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    bedrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    area_sqft: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    amenities: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    latitude: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        comment="Derived by geocoding the address"
    )

    longitude: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
        comment="Derived by geocoding the address"
    )

    status: Mapped[ListingStatus] = mapped_column(
        SQLEnum(
            ListingStatus,
            native_enum=False,
            length=16,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=ListingStatus.PENDING,
        index=True,
        comment="Moderation status"
    )

    owner: Mapped["User"] = relationship(
        "User",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        """String representation of the listing."""
        return f"<Listing(id={self.id}, title={self.title[:30]}, rent={self.rent}, status={self.status})>"

    def to_dict(self, include_owner: bool = False) -> dict:
        """
        Convert listing to dictionary.

        Args:
            include_owner: Whether to include the owner's contact summary

        Returns:
            Dictionary representation of listing
        """
        result = {
            "id": str(self.id),
            "owner_id": str(self.owner_id),
            "title": self.title,
            "description": self.description,
            "address": self.address,
            "city": self.city,
            "rent": self.rent,
            "deposit": self.deposit,
            "property_type": self.property_type,
            "occupancy_preference": self.occupancy_preference,
            "furnished": self.furnished,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "area_sqft": self.area_sqft,
            "amenities": list(self.amenities or []),
            "latitude": self.latitude,
            "longitude": self.longitude,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if include_owner and self.owner:
            result["owner"] = self.owner.contact_summary()

        return result


# Public search: verified listings, newest first
status_created_index = Index(
    'idx_listings_status_created',
    Listing.status,
    Listing.created_at.desc()
)

# Price-bounded searches within a status
status_rent_index = Index(
    'idx_listings_status_rent',
    Listing.status,
    Listing.rent
)

# Owner's own listings
owner_status_index = Index(
    'idx_listings_owner_status',
    Listing.owner_id,
    Listing.status
)
