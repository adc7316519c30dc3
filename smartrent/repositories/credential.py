"""
Credential repository used by the built-in identity provider.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from smartrent.repositories.base import BaseRepository
from smartrent.models.credential import Credential
from typing import Optional
import uuid
import logging

logger = logging.getLogger(__name__)


class CredentialRepository(BaseRepository[Credential]):
    """Stores email/password identities."""

    def __init__(self, db: AsyncSession):
        super().__init__(Credential, db)

    async def create_credential(self, email: str, password: str) -> Credential:
        """
        Hash the password and store a new identity.

        Raises:
            ValueError: If the password is too short
            IntegrityError: If the email is already registered
        """
        credential = await self.create({
            "email": email.lower().strip(),
            "hashed_password": Credential.hash_password(password),
        })
        logger.info(f"Created credential for {credential.email} (ID: {credential.id})")
        return credential

    async def get_by_email(self, email: str) -> Optional[Credential]:
        result = await self.db.execute(
            select(Credential).where(Credential.email == email.lower().strip())
        )
        return result.scalar_one_or_none()

    async def authenticate(self, email: str, password: str) -> Optional[Credential]:
        """
        Check an email/password pair.

        Returns:
            Credential if the password matches, None otherwise
        """
        credential = await self.get_by_email(email)

        if not credential:
            logger.debug(f"Authentication failed: {email} not registered")
            return None

        if not credential.verify_password(password):
            logger.debug(f"Authentication failed: invalid password for {email}")
            return None

        return credential

    async def delete_credential(self, credential_id: uuid.UUID) -> bool:
        """Delete an identity. Returns False if it did not exist."""
        return await self.delete_where(Credential.id == credential_id) > 0
