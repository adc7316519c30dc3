"""
User repository for profile lookups and role management.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from smartrent.repositories.base import BaseRepository
from smartrent.models.user import User, UserRole
from typing import Optional, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user profiles.
    Profiles share their id with the identity-provider identity.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user profile with email normalization.

        Args:
            user_data: Dictionary containing user information
                      Must include: id, email, name
                      Optional: phone, role (defaults to USER)

        Returns:
            Created user instance

        Raises:
            ValueError: If the email is malformed
            IntegrityError: If a profile with the same id or email exists
        """
        email = User.validate_email_format(user_data["email"])

        create_data = {
            **user_data,
            "email": email,
            "role": user_data.get("role") or UserRole.USER,
        }

        created_user = await self.create(create_data)
        logger.info(f"Created user profile: {created_user.email} (ID: {created_user.id}, role: {created_user.role.value})")
        return created_user

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        try:
            normalized_email = email.lower().strip()

            result = await self.db.execute(select(User).where(User.email == normalized_email))
            user = result.scalar_one_or_none()

            if not user:
                logger.debug(f"User with email {email} not found")

            return user
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def set_role(self, user_id: uuid.UUID, role: UserRole) -> Optional[User]:
        """
        Change a user's role.

        Returns:
            Updated user, or None if no such user exists
        """
        if not await self.update_where(User.id == user_id, values={"role": role}):
            return None

        logger.info(f"Changed role of user {user_id} to {role.value}")
        return await self.get_by_id(user_id, refresh=True)
