"""
Test configuration and fixtures for the SmartRent API.
Provides an in-memory database, an API client, test data factories and token helpers.
"""

import os

# Settings are read at import time, so the test environment must be in place first
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["IDENTITY_PROVIDER"] = "local"
os.environ["GOOGLE_MAPS_API_KEY"] = ""

import pytest
import uuid
from typing import AsyncGenerator, Optional, List
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport
import httpx

from smartrent.config import Settings
from smartrent.main import app
from smartrent.database import Base, get_db
from smartrent.models.user import User, UserRole
from smartrent.models.listing import Listing, ListingStatus
from smartrent.models.review import Review
from smartrent.repositories.listing import ListingRepository
from smartrent.repositories.review import ReviewRepository
from smartrent.services.auth import AuthService
from smartrent.services.geocoding import GeocodingService
from smartrent.services.identity import LocalIdentityProvider
from smartrent.utils.auth import create_access_token
from smartrent.utils.dependencies import get_geocoder


TEST_DATABASE_URL = "sqlite+aiosqlite://"
TEST_PASSWORD = "testpassword123"

# Coordinates returned by the mocked geocoding API
TEST_LATITUDE = 12.9716
TEST_LONGITUDE = 77.5946


def geocoding_payload(lat: float = TEST_LATITUDE, lng: float = TEST_LONGITUDE) -> dict:
    """Minimal Google Geocoding API response with one result."""
    return {
        "status": "OK",
        "results": [
            {
                "formatted_address": "Test Address",
                "geometry": {"location": {"lat": lat, "lng": lng}},
            }
        ],
    }


def make_geocoder(handler=None, api_key: Optional[str] = "test-maps-key") -> GeocodingService:
    """
    Build a GeocodingService whose HTTP calls are answered by `handler`.

    The default handler returns TEST_LATITUDE/TEST_LONGITUDE for any address.
    """
    if handler is None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=geocoding_payload())

    settings = Settings(google_maps_api_key=api_key)
    return GeocodingService(settings=settings, transport=httpx.MockTransport(handler))


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test; one shared connection so every session sees the same data."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session used by tests and factories directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    API client with the database and geocoder swapped for test doubles.

    Each request gets its own session, like get_db does in production.
    """
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_geocoder] = lambda: make_geocoder()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    """Bearer header for a user, signed by the built-in identity provider."""
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


# Test data factories
class UserFactory:
    """Factory for creating test users with credentials."""

    @staticmethod
    async def create_user(
        db: AsyncSession,
        email: str = None,
        password: str = TEST_PASSWORD,
        name: str = "Test User",
        phone: Optional[str] = "+91 90000 00000",
        role: UserRole = UserRole.USER
    ) -> User:
        """Register a user through the built-in identity provider."""
        auth_service = AuthService(db, LocalIdentityProvider(db))
        return await auth_service.register(
            email=email or f"test{uuid.uuid4().hex[:8]}@example.com",
            password=password,
            name=name,
            phone=phone,
            role=role
        )


class ListingFactory:
    """Factory for creating test listings."""

    @staticmethod
    def create_listing_data(
        title: str = "Test Listing",
        address: str = "12 MG Road",
        city: str = "Bengaluru",
        rent: int = 15000,
        property_type: str = "1bhk",
        occupancy_preference: Optional[str] = "students",
        furnished: bool = False,
        amenities: Optional[List[str]] = None,
        **extra
    ) -> dict:
        """Request body for POST /listings."""
        data = {
            "title": title,
            "description": "A test listing",
            "address": address,
            "city": city,
            "rent": rent,
            "deposit": rent * 2,
            "property_type": property_type,
            "occupancy_preference": occupancy_preference,
            "furnished": furnished,
            "amenities": amenities if amenities is not None else ["wifi"],
        }
        data.update(extra)
        return data

    @staticmethod
    async def create_listing(
        db: AsyncSession,
        owner: User,
        status: ListingStatus = ListingStatus.VERIFIED,
        **kwargs
    ) -> Listing:
        """Insert a listing directly, bypassing moderation."""
        data = ListingFactory.create_listing_data(**kwargs)
        data["owner_id"] = owner.id
        data["status"] = status
        return await ListingRepository(db).create_listing(data)


class ReviewFactory:
    """Factory for creating test reviews."""

    @staticmethod
    async def create_review(
        db: AsyncSession,
        user: User,
        listing: Listing,
        rating: int = 4,
        comment: Optional[str] = "Nice place"
    ) -> Review:
        return await ReviewRepository(db).create_review(
            user_id=user.id,
            listing_id=listing.id,
            rating=rating,
            comment=comment
        )


# Common test fixtures
@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Plain user (tenant)."""
    return await UserFactory.create_user(db_session, email="user@test.com", name="Test Tenant")


@pytest.fixture
async def test_owner(db_session: AsyncSession) -> User:
    """User with the owner role."""
    return await UserFactory.create_user(
        db_session,
        email="owner@test.com",
        name="Test Owner",
        phone="+91 98765 43210",
        role=UserRole.OWNER
    )


@pytest.fixture
async def other_owner(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(
        db_session,
        email="other.owner@test.com",
        name="Other Owner",
        role=UserRole.OWNER
    )


@pytest.fixture
async def test_admin(db_session: AsyncSession) -> User:
    """User with the admin role."""
    return await UserFactory.create_user(
        db_session,
        email="admin@test.com",
        name="Test Admin",
        role=UserRole.ADMIN
    )


@pytest.fixture
async def verified_listing(db_session: AsyncSession, test_owner: User) -> Listing:
    return await ListingFactory.create_listing(db_session, test_owner, title="Verified Listing")


@pytest.fixture
async def pending_listing(db_session: AsyncSession, test_owner: User) -> Listing:
    return await ListingFactory.create_listing(
        db_session,
        test_owner,
        status=ListingStatus.PENDING,
        title="Pending Listing"
    )
