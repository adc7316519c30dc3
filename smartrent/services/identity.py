"""
Identity providers.

An identity provider turns email/password into bearer tokens and bearer tokens
back into an identity. Profiles (name, phone, role) live in the users table and
are handled by AuthService; providers only know ids and emails.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Tuple, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from jose import JWTError, ExpiredSignatureError
from smartrent.config import Settings, settings as default_settings
from smartrent.repositories.base import is_unique_violation
from smartrent.repositories.credential import CredentialRepository
from smartrent.utils.auth import create_access_token, create_refresh_token, verify_token
from smartrent.utils.exceptions import (
    BadRequestError,
    DuplicateResourceError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError
)
import httpx
import uuid
import logging

logger = logging.getLogger(__name__)


@dataclass
class IdentityUser:
    """Identity as known to the provider."""
    id: uuid.UUID
    email: str


@dataclass
class IdentitySession:
    """Bearer tokens issued at login or refresh."""
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": self.token_type,
            "expires_in": self.expires_in,
        }


class IdentityProvider(ABC):
    """Interface shared by the built-in and hosted identity providers."""

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> IdentityUser:
        """
        Register a new identity.

        Raises:
            DuplicateResourceError: If the email is already registered
            BadRequestError: If the provider rejects the credentials
        """

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Tuple[IdentityUser, IdentitySession]:
        """
        Exchange email/password for a session.

        Raises:
            InvalidCredentialsError: If the credentials are wrong
        """

    @abstractmethod
    async def refresh(self, refresh_token: str) -> Tuple[IdentityUser, IdentitySession]:
        """
        Exchange a refresh token for a new session.

        Raises:
            InvalidTokenError: If the refresh token is rejected
        """

    @abstractmethod
    async def get_user(self, access_token: str) -> IdentityUser:
        """
        Resolve a bearer token to an identity.

        Raises:
            InvalidTokenError: If the token is rejected
        """

    @abstractmethod
    async def delete_user(self, user_id: uuid.UUID) -> None:
        """Remove an identity whose profile could not be stored."""


class LocalIdentityProvider(IdentityProvider):
    """
    Built-in provider: bcrypt credentials in the database and self-signed JWTs.
    """

    def __init__(self, db: AsyncSession, settings: Optional[Settings] = None):
        self.credential_repo = CredentialRepository(db)
        self.settings = settings or default_settings

    async def sign_up(self, email: str, password: str) -> IdentityUser:
        try:
            credential = await self.credential_repo.create_credential(email, password)
        except IntegrityError as e:
            if is_unique_violation(e):
                raise DuplicateResourceError("User already registered")
            raise
        except ValueError as e:
            raise BadRequestError(str(e))

        return IdentityUser(id=credential.id, email=credential.email)

    async def sign_in(self, email: str, password: str) -> Tuple[IdentityUser, IdentitySession]:
        credential = await self.credential_repo.authenticate(email, password)
        if not credential:
            logger.warning(f"Failed login attempt for email: {email}")
            raise InvalidCredentialsError()

        identity = IdentityUser(id=credential.id, email=credential.email)
        return identity, self._issue_session(identity)

    async def refresh(self, refresh_token: str) -> Tuple[IdentityUser, IdentitySession]:
        try:
            payload = verify_token(refresh_token, token_type="refresh")
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            logger.debug(f"Rejected refresh token: {e}")
            raise InvalidTokenError()

        identity = self._identity_from_payload(payload.user_id, payload.email)
        return identity, self._issue_session(identity)

    async def get_user(self, access_token: str) -> IdentityUser:
        try:
            payload = verify_token(access_token, token_type="access")
        except JWTError as e:
            logger.debug(f"Rejected access token: {e}")
            raise InvalidTokenError()

        return self._identity_from_payload(payload.user_id, payload.email)

    async def delete_user(self, user_id: uuid.UUID) -> None:
        await self.credential_repo.delete_credential(user_id)

    def _issue_session(self, identity: IdentityUser) -> IdentitySession:
        expires = timedelta(minutes=self.settings.access_token_expire_minutes)
        return IdentitySession(
            access_token=create_access_token(identity.id, identity.email, expires_delta=expires),
            refresh_token=create_refresh_token(identity.id, identity.email),
            expires_in=int(expires.total_seconds()),
        )

    @staticmethod
    def _identity_from_payload(user_id: str, email: str) -> IdentityUser:
        try:
            return IdentityUser(id=uuid.UUID(user_id), email=email)
        except ValueError:
            raise InvalidTokenError()


class SupabaseIdentityProvider(IdentityProvider):
    """
    Hosted provider backed by the Supabase GoTrue REST API.

    Args:
        settings: Settings with SUPABASE_URL and an API key
        transport: Optional httpx transport, used to swap the network out in tests
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings or default_settings
        if not self.settings.supabase_url or not self.settings.supabase_api_key:
            raise ValueError("Supabase identity provider requires SUPABASE_URL and an API key")

        self.base_url = self.settings.supabase_url.rstrip("/") + "/auth/v1"
        self.transport = transport

    async def sign_up(self, email: str, password: str) -> IdentityUser:
        response = await self._request("POST", "/signup", json={"email": email, "password": password})

        if response.is_client_error:
            message = self._error_message(response)
            if "already" in message.lower():
                raise DuplicateResourceError(message)
            raise BadRequestError(message)
        response.raise_for_status()

        data = response.json()
        # Depending on email confirmation settings GoTrue returns either the user or a session
        return self._parse_user(data.get("user") or data)

    async def sign_in(self, email: str, password: str) -> Tuple[IdentityUser, IdentitySession]:
        response = await self._request(
            "POST", "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password}
        )

        if response.is_client_error:
            logger.warning(f"Failed login attempt for email: {email}")
            raise InvalidCredentialsError(self._error_message(response))
        response.raise_for_status()

        return self._parse_session(response.json())

    async def refresh(self, refresh_token: str) -> Tuple[IdentityUser, IdentitySession]:
        response = await self._request(
            "POST", "/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token}
        )

        if response.is_client_error:
            raise InvalidTokenError()
        response.raise_for_status()

        return self._parse_session(response.json())

    async def get_user(self, access_token: str) -> IdentityUser:
        response = await self._request("GET", "/user", token=access_token)

        if response.is_client_error:
            logger.debug(f"Hosted provider rejected token with status {response.status_code}")
            raise InvalidTokenError()
        response.raise_for_status()

        return self._parse_user(response.json())

    async def delete_user(self, user_id: uuid.UUID) -> None:
        """
        Delete a user through the GoTrue admin API.

        Needs SUPABASE_SERVICE_ROLE_KEY; with only the anon key the identity is left in place.
        """
        service_key = self.settings.supabase_service_role_key
        if not service_key:
            logger.warning(f"Cannot delete hosted identity {user_id} without a service role key")
            return

        response = await self._request("DELETE", f"/admin/users/{user_id}", token=service_key)
        if response.status_code == 404:
            return
        response.raise_for_status()

    async def _request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        **kwargs
    ) -> httpx.Response:
        headers = {"apikey": self.settings.supabase_api_key}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.settings.identity_timeout,
            transport=self.transport
        ) as client:
            return await client.request(method, path, headers=headers, **kwargs)

    def _parse_session(self, data: Dict[str, Any]) -> Tuple[IdentityUser, IdentitySession]:
        try:
            session = IdentitySession(
                access_token=data["access_token"],
                refresh_token=data["refresh_token"],
                token_type=data.get("token_type", "bearer"),
                expires_in=int(data.get("expires_in", 0)),
            )
        except (KeyError, TypeError, ValueError):
            raise InvalidTokenError("Malformed session returned by identity provider")

        return self._parse_user(data.get("user") or {}), session

    @staticmethod
    def _parse_user(data: Dict[str, Any]) -> IdentityUser:
        try:
            return IdentityUser(id=uuid.UUID(str(data["id"])), email=data.get("email") or "")
        except (KeyError, TypeError, ValueError):
            raise InvalidTokenError("Malformed user returned by identity provider")

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text or f"Identity provider returned {response.status_code}"

        if isinstance(data, dict):
            for key in ("msg", "error_description", "message", "error"):
                if data.get(key):
                    return str(data[key])
        return f"Identity provider returned {response.status_code}"


def create_identity_provider(
    db: AsyncSession,
    settings: Optional[Settings] = None
) -> IdentityProvider:
    """Build the provider selected by IDENTITY_PROVIDER."""
    settings = settings or default_settings

    if settings.identity_provider == "supabase":
        return SupabaseIdentityProvider(settings)
    return LocalIdentityProvider(db, settings)
