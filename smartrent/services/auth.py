"""
Authentication service: signup, login, token refresh and bearer resolution.
Credentials are delegated to an IdentityProvider; profiles and roles live in the users table.
"""

from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from smartrent.repositories.base import is_unique_violation
from smartrent.repositories.user import UserRepository
from smartrent.models.user import User, UserRole
from smartrent.services.identity import IdentityProvider, IdentitySession, IdentityUser
from smartrent.utils.exceptions import (
    BadRequestError,
    DuplicateResourceError,
    NotFoundError,
    UnauthorizedError
)
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing identities and their profiles.
    The role is never taken from a token: every resolution re-reads the users row.
    """

    def __init__(self, db_session: AsyncSession, identity_provider: IdentityProvider):
        self.db = db_session
        self.identity = identity_provider
        self.user_repo = UserRepository(db_session)

    async def register(
        self,
        email: str,
        password: str,
        name: str,
        phone: Optional[str] = None,
        role: UserRole = UserRole.USER
    ) -> User:
        """
        Create an identity and its profile row with the same id.

        Args:
            email: Email address
            password: Plain text password
            name: Display name
            phone: Optional contact phone
            role: Initial role; callers decide which roles may be self-assigned

        Returns:
            Created user profile

        Raises:
            DuplicateResourceError: If the email is already registered
            BadRequestError: If the provider rejects the signup or the profile cannot be stored
        """
        identity = await self.identity.sign_up(email, password)

        try:
            user = await self.user_repo.create_user({
                "id": identity.id,
                "email": email,
                "name": name,
                "phone": phone,
                "role": role,
            })
        except IntegrityError as e:
            await self._discard_identity(identity)
            if is_unique_violation(e):
                raise DuplicateResourceError("User already registered")
            raise BadRequestError(f"Failed to create user profile: {e.orig}")
        except ValueError as e:
            await self._discard_identity(identity)
            raise BadRequestError(str(e))

        logger.info(f"User registered: {user.email} (ID: {user.id}, role: {user.role.value})")
        return user

    async def _discard_identity(self, identity: IdentityUser) -> None:
        """Remove an identity left without a profile so its email can sign up again."""
        try:
            await self.identity.delete_user(identity.id)
        except Exception as e:
            logger.error(f"Failed to remove identity {identity.id} after profile insert failed: {e}")
        else:
            logger.warning(f"Removed identity {identity.id} ({identity.email}) after profile insert failed")

    async def login(self, email: str, password: str) -> Tuple[User, IdentitySession]:
        """
        Authenticate with email and password.

        Returns:
            Tuple of (profile, session)

        Raises:
            InvalidCredentialsError: If credentials are invalid
            BadRequestError: If the identity has no profile row
        """
        identity, session = await self.identity.sign_in(email, password)

        user = await self.user_repo.get_by_id(identity.id, refresh=True)
        if not user:
            logger.error(f"Identity {identity.id} authenticated but has no profile")
            raise BadRequestError("Failed to fetch user profile")

        logger.info(f"User logged in: {user.email}")
        return user, session

    async def refresh_session(self, refresh_token: str) -> Tuple[User, IdentitySession]:
        """
        Exchange a refresh token for a new session.

        Raises:
            InvalidTokenError: If the refresh token is rejected
            BadRequestError: If the identity has no profile row
        """
        identity, session = await self.identity.refresh(refresh_token)

        user = await self.user_repo.get_by_id(identity.id, refresh=True)
        if not user:
            raise BadRequestError("Failed to fetch user profile")

        return user, session

    async def get_current_user(self, token: str) -> User:
        """
        Resolve a bearer token to the caller's profile.

        Args:
            token: Bearer token from the Authorization header

        Returns:
            Current User with a freshly read role

        Raises:
            InvalidTokenError: If the provider rejects the token
            UnauthorizedError: If the identity has no profile row
        """
        identity = await self.identity.get_user(token)

        user = await self.user_repo.get_by_id(identity.id, refresh=True)
        if not user:
            logger.warning(f"Valid token for identity {identity.id} without a profile")
            raise UnauthorizedError("User profile not found")

        return user

    async def change_role(self, email: str, role: UserRole) -> User:
        """
        Change the role of an existing user, e.g. to promote an admin.

        Raises:
            NotFoundError: If no user has that email
        """
        user = await self.user_repo.get_by_email(email)
        if not user:
            raise NotFoundError("User", detail=f"User not found with email: {email}")

        updated = await self.user_repo.set_role(user.id, role)
        if not updated:
            raise NotFoundError("User", str(user.id))

        logger.info(f"Role of {email} changed to {role.value}")
        return updated
