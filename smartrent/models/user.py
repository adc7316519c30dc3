"""
User profile model with role management.
The id matches the identity-provider identity; the role gates authorization.
"""

from sqlalchemy import String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from smartrent.database import Base
from email_validator import validate_email, EmailNotValidError
from typing import Optional
import enum


class UserRole(str, enum.Enum):
    """User role enumeration for role-based access control."""
    USER = "user"
    OWNER = "owner"
    ADMIN = "admin"


class User(Base):
    """
    User profile for marketplace members.
    Plain users browse and review, owners list properties, admins moderate.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - must be unique and valid"
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name"
    )

    phone: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True,
        comment="Contact phone shown to prospective tenants"
    )

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(
            UserRole,
            native_enum=False,
            length=16,
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
        default=UserRole.USER,
        index=True,
        comment="User role for access control"
    )

    def __repr__(self) -> str:
        """String representation of the user."""
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """
        Validate email format using email-validator.

        Args:
            email: Email address to validate

        Returns:
            Normalized email address

        Raises:
            ValueError: If email format is invalid
        """
        try:
            valid_email = validate_email(email, check_deliverability=False)
            return valid_email.normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")

    @property
    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self.role == UserRole.ADMIN

    @property
    def is_owner(self) -> bool:
        """Check if user has owner role."""
        return self.role == UserRole.OWNER

    def contact_summary(self) -> dict:
        """Owner contact fields denormalized onto listings."""
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
        }

    def to_dict(self) -> dict:
        """
        Convert user to dictionary.

        Returns:
            Dictionary representation of user
        """
        return {
            "id": str(self.id),
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
            "role": self.role.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
