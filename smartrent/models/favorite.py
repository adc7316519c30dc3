"""
Favorite model: many-to-many join between users and listings.
"""

from sqlalchemy import ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from smartrent.database import Base
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from smartrent.models.listing import Listing


class Favorite(Base):
    """A user's saved listing. At most one row per (user, listing)."""

    __tablename__ = "favorites"

    __table_args__ = (
        UniqueConstraint("user_id", "listing_id", name="uq_favorites_user_listing"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    listing: Mapped["Listing"] = relationship(
        "Listing",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Favorite(user_id={self.user_id}, listing_id={self.listing_id})>"

    def to_dict(self, include_listing: bool = False) -> dict:
        result = {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "listing_id": str(self.listing_id),
            "created_at": self.created_at.isoformat(),
        }

        if include_listing and self.listing:
            result["listing"] = self.listing.to_dict(include_owner=True)

        return result
