"""
Tests for identity providers: the built-in JWT provider and the hosted Supabase provider.
"""

import pytest
import json
import uuid
from datetime import timedelta
import httpx

from smartrent.config import Settings
from smartrent.services.identity import (
    IdentitySession,
    LocalIdentityProvider,
    SupabaseIdentityProvider,
    create_identity_provider
)
from smartrent.utils.auth import create_refresh_token, create_access_token
from smartrent.utils.exceptions import (
    BadRequestError,
    DuplicateResourceError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError
)
from tests.conftest import TEST_PASSWORD

SUPABASE_URL = "https://project.supabase.co"
USER_ID = "6f1c1a8e-9a51-4d0f-8d4b-8c3d1b0f4a11"


def supabase_settings(**overrides) -> Settings:
    values = {
        "identity_provider": "supabase",
        "supabase_url": SUPABASE_URL,
        "supabase_anon_key": "anon-key",
    }
    values.update(overrides)
    return Settings(**values)


def session_payload(email: str = "tenant@example.com") -> dict:
    return {
        "access_token": "access-abc",
        "refresh_token": "refresh-xyz",
        "token_type": "bearer",
        "expires_in": 3600,
        "user": {"id": USER_ID, "email": email},
    }


class TestLocalIdentityProvider:
    """Test the built-in provider."""

    @pytest.mark.asyncio
    async def test_sign_up_and_sign_in(self, db_session):
        provider = LocalIdentityProvider(db_session)

        identity = await provider.sign_up("Tenant@Example.com", TEST_PASSWORD)
        signed_in, session = await provider.sign_in("tenant@example.com", TEST_PASSWORD)

        assert identity.email == "tenant@example.com"
        assert signed_in.id == identity.id
        assert isinstance(session, IdentitySession)
        assert (await provider.get_user(session.access_token)).id == identity.id

    @pytest.mark.asyncio
    async def test_sign_up_duplicate(self, db_session):
        provider = LocalIdentityProvider(db_session)
        await provider.sign_up("dup@example.com", TEST_PASSWORD)

        with pytest.raises(DuplicateResourceError):
            await provider.sign_up("dup@example.com", TEST_PASSWORD)

    @pytest.mark.asyncio
    async def test_delete_user(self, db_session):
        provider = LocalIdentityProvider(db_session)
        identity = await provider.sign_up("leaving@example.com", TEST_PASSWORD)

        await provider.delete_user(identity.id)

        with pytest.raises(InvalidCredentialsError):
            await provider.sign_in("leaving@example.com", TEST_PASSWORD)
        assert (await provider.sign_up("leaving@example.com", TEST_PASSWORD)).email == "leaving@example.com"

    @pytest.mark.asyncio
    async def test_sign_in_wrong_password(self, db_session):
        provider = LocalIdentityProvider(db_session)
        await provider.sign_up("tenant@example.com", TEST_PASSWORD)

        with pytest.raises(InvalidCredentialsError):
            await provider.sign_in("tenant@example.com", "not-the-password")

    @pytest.mark.asyncio
    async def test_get_user_rejects_refresh_token(self, db_session):
        token = create_refresh_token(uuid.uuid4(), "tenant@example.com")

        with pytest.raises(InvalidTokenError):
            await LocalIdentityProvider(db_session).get_user(token)

    @pytest.mark.asyncio
    async def test_get_user_rejects_expired_token(self, db_session):
        token = create_access_token(uuid.uuid4(), "tenant@example.com", expires_delta=timedelta(seconds=-10))

        with pytest.raises(InvalidTokenError):
            await LocalIdentityProvider(db_session).get_user(token)

    @pytest.mark.asyncio
    async def test_refresh_with_expired_token(self, db_session):
        token = create_refresh_token(uuid.uuid4(), "tenant@example.com", expires_delta=timedelta(seconds=-10))

        with pytest.raises(TokenExpiredError):
            await LocalIdentityProvider(db_session).refresh(token)

    @pytest.mark.asyncio
    async def test_refresh_issues_new_session(self, db_session):
        user_id = uuid.uuid4()
        token = create_refresh_token(user_id, "tenant@example.com")

        identity, session = await LocalIdentityProvider(db_session).refresh(token)

        assert identity.id == user_id
        assert session.expires_in == 3600


class TestSupabaseIdentityProvider:
    """Test the hosted provider against a mocked GoTrue API."""

    def make_provider(self, handler) -> SupabaseIdentityProvider:
        return SupabaseIdentityProvider(supabase_settings(), transport=httpx.MockTransport(handler))

    @pytest.mark.asyncio
    async def test_sign_up(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["apikey"] = request.headers.get("apikey")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": USER_ID, "email": "tenant@example.com"})

        identity = await self.make_provider(handler).sign_up("tenant@example.com", TEST_PASSWORD)

        assert identity.id == uuid.UUID(USER_ID)
        assert seen["url"] == f"{SUPABASE_URL}/auth/v1/signup"
        assert seen["apikey"] == "anon-key"
        assert seen["body"] == {"email": "tenant@example.com", "password": TEST_PASSWORD}

    @pytest.mark.asyncio
    async def test_sign_up_returning_session(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=session_payload())

        identity = await self.make_provider(handler).sign_up("tenant@example.com", TEST_PASSWORD)

        assert identity.email == "tenant@example.com"

    @pytest.mark.asyncio
    async def test_sign_up_already_registered(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"msg": "User already registered"})

        with pytest.raises(DuplicateResourceError, match="already registered"):
            await self.make_provider(handler).sign_up("tenant@example.com", TEST_PASSWORD)

    @pytest.mark.asyncio
    async def test_sign_up_rejected(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error_description": "Password should be at least 6 characters"})

        with pytest.raises(BadRequestError, match="at least 6 characters"):
            await self.make_provider(handler).sign_up("tenant@example.com", "abc")

    @pytest.mark.asyncio
    async def test_sign_in(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["grant_type"] = request.url.params.get("grant_type")
            return httpx.Response(200, json=session_payload())

        identity, session = await self.make_provider(handler).sign_in("tenant@example.com", TEST_PASSWORD)

        assert seen["grant_type"] == "password"
        assert identity.id == uuid.UUID(USER_ID)
        assert session.to_dict() == {
            "access_token": "access-abc",
            "refresh_token": "refresh-xyz",
            "token_type": "bearer",
            "expires_in": 3600,
        }

    @pytest.mark.asyncio
    async def test_sign_in_invalid_credentials(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "invalid_grant", "error_description": "Invalid login credentials"})

        with pytest.raises(InvalidCredentialsError):
            await self.make_provider(handler).sign_in("tenant@example.com", "wrong")

    @pytest.mark.asyncio
    async def test_refresh(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params.get("grant_type") == "refresh_token"
            assert json.loads(request.content) == {"refresh_token": "refresh-xyz"}
            return httpx.Response(200, json=session_payload())

        identity, session = await self.make_provider(handler).refresh("refresh-xyz")

        assert session.access_token == "access-abc"

    @pytest.mark.asyncio
    async def test_refresh_rejected(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "invalid_grant"})

        with pytest.raises(InvalidTokenError):
            await self.make_provider(handler).refresh("stale")

    @pytest.mark.asyncio
    async def test_get_user_sends_bearer(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/auth/v1/user"
            assert request.headers["authorization"] == "Bearer access-abc"
            return httpx.Response(200, json={"id": USER_ID, "email": "tenant@example.com"})

        identity = await self.make_provider(handler).get_user("access-abc")

        assert identity.id == uuid.UUID(USER_ID)

    @pytest.mark.asyncio
    async def test_get_user_rejected(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"msg": "invalid JWT"})

        with pytest.raises(InvalidTokenError):
            await self.make_provider(handler).get_user("bad")

    @pytest.mark.asyncio
    async def test_malformed_user_payload(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"email": "tenant@example.com"})

        with pytest.raises(InvalidTokenError):
            await self.make_provider(handler).get_user("access-abc")

    @pytest.mark.asyncio
    async def test_server_error_propagates(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="bad gateway")

        with pytest.raises(httpx.HTTPStatusError):
            await self.make_provider(handler).get_user("access-abc")

    @pytest.mark.asyncio
    async def test_delete_user_uses_admin_api(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["authorization"] = request.headers.get("authorization")
            return httpx.Response(200, json={})

        provider = SupabaseIdentityProvider(
            supabase_settings(supabase_service_role_key="service-key"),
            transport=httpx.MockTransport(handler)
        )
        await provider.delete_user(uuid.UUID(USER_ID))

        assert seen == {
            "method": "DELETE",
            "path": f"/auth/v1/admin/users/{USER_ID}",
            "authorization": "Bearer service-key",
        }

    @pytest.mark.asyncio
    async def test_delete_user_without_service_key_is_skipped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        await self.make_provider(handler).delete_user(uuid.UUID(USER_ID))

    def test_requires_url_and_key(self):
        settings = Settings(identity_provider="local", supabase_url=None)

        with pytest.raises(ValueError):
            SupabaseIdentityProvider(settings)


class TestProviderSelection:
    """Test configuration-driven provider selection."""

    def test_local_by_default(self, db_session):
        provider = create_identity_provider(db_session, Settings(identity_provider="local"))
        assert isinstance(provider, LocalIdentityProvider)

    def test_supabase(self, db_session):
        provider = create_identity_provider(db_session, supabase_settings())

        assert isinstance(provider, SupabaseIdentityProvider)
        assert provider.base_url == f"{SUPABASE_URL}/auth/v1"

    def test_supabase_without_url_fails_at_startup(self):
        with pytest.raises(ValueError, match="SUPABASE_URL"):
            Settings(identity_provider="supabase", supabase_url=None)

    def test_service_role_key_preferred(self):
        settings = supabase_settings(supabase_service_role_key="service-key")
        assert settings.supabase_api_key == "service-key"
