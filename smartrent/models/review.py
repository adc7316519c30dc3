"""
Review model: one rating per user per listing.
"""

from sqlalchemy import Integer, Text, ForeignKey, UniqueConstraint, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from smartrent.database import Base
import uuid
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from smartrent.models.user import User

MIN_RATING = 1
MAX_RATING = 5


class Review(Base):
    """
    Rating and optional comment left by a user on a listing.
    The listing's average rating is computed from these rows at read time.
    """

    __tablename__ = "reviews"

    __table_args__ = (
        UniqueConstraint("user_id", "listing_id", name="uq_reviews_user_listing"),
        CheckConstraint(
            f"rating >= {MIN_RATING} AND rating <= {MAX_RATING}",
            name="ck_reviews_rating_range"
        ),
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

    rating: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    comment: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    user: Mapped["User"] = relationship(
        "User",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Review(user_id={self.user_id}, listing_id={self.listing_id}, rating={self.rating})>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "listing_id": str(self.listing_id),
            "rating": self.rating,
            "comment": self.comment,
            "reviewer_name": self.user.name if self.user else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
