"""
Credential store for the built-in identity provider.
Holds password hashes apart from the public user profile.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from smartrent.database import Base
from passlib.context import CryptContext

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class Credential(Base):
    """Email/password identity; its id becomes the profile id in `users`."""

    __tablename__ = "credentials"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    def __repr__(self) -> str:
        return f"<Credential(id={self.id}, email={self.email})>"

    @classmethod
    def hash_password(cls, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        if not password or len(password) < 6:
            raise ValueError("Password must be at least 6 characters long")

        return pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""
        return pwd_context.verify(password, self.hashed_password)
