"""
Tests for service classes.
Tests business rules, authorization and error mapping without HTTP.
"""

import pytest
import uuid
import httpx

from smartrent.models.listing import Listing, ListingStatus
from smartrent.models.user import User, UserRole
from smartrent.repositories.listing import ListingRepository, ListingSearchFilters
from smartrent.repositories.user import UserRepository
from smartrent.schemas.listing import ListingCreate, ListingUpdate
from smartrent.schemas.review import ReviewCreate, ReviewUpdate
from smartrent.services.admin import AdminService
from smartrent.services.auth import AuthService
from smartrent.services.favorite import FavoriteService
from smartrent.services.identity import LocalIdentityProvider
from smartrent.services.listing import ListingService
from smartrent.services.review import ReviewService
from smartrent.utils.exceptions import (
    BadRequestError,
    DuplicateResourceError,
    InsufficientPermissionsError,
    InvalidCredentialsError,
    InvalidStatusActionError,
    InvalidTokenError,
    ListingNotFoundError,
    NotFoundError,
    UnauthorizedError,
    ValidationError
)
from tests.conftest import (
    ListingFactory,
    ReviewFactory,
    TEST_PASSWORD,
    TEST_LATITUDE,
    TEST_LONGITUDE,
    make_geocoder
)


@pytest.fixture
def auth_service(db_session) -> AuthService:
    return AuthService(db_session, LocalIdentityProvider(db_session))


@pytest.fixture
def listing_service(db_session) -> ListingService:
    return ListingService(db_session, geocoder=make_geocoder())


@pytest.fixture
def favorite_service(db_session) -> FavoriteService:
    return FavoriteService(db_session)


@pytest.fixture
def review_service(db_session) -> ReviewService:
    return ReviewService(db_session)


@pytest.fixture
def admin_service(db_session) -> AdminService:
    return AdminService(db_session)


class TestAuthService:
    """Test AuthService functionality."""

    @pytest.mark.asyncio
    async def test_register_creates_profile_with_identity_id(self, auth_service: AuthService, db_session):
        user = await auth_service.register("New@Example.com", TEST_PASSWORD, "New Person", role=UserRole.OWNER)
        credential = await LocalIdentityProvider(db_session).credential_repo.get_by_email("new@example.com")

        assert user.email == "new@example.com"
        assert user.role == UserRole.OWNER
        assert user.id == credential.id

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, auth_service: AuthService, test_user: User):
        with pytest.raises(DuplicateResourceError):
            await auth_service.register("user@test.com", TEST_PASSWORD, "Again")

    @pytest.mark.asyncio
    async def test_failed_profile_insert_removes_credential(self, auth_service: AuthService, db_session):
        # A profile row with this email but no credential makes the profile insert fail
        await UserRepository(db_session).create_user({
            "id": uuid.uuid4(),
            "email": "taken@example.com",
            "name": "Imported Profile",
        })

        with pytest.raises(DuplicateResourceError):
            await auth_service.register("taken@example.com", TEST_PASSWORD, "Newcomer")

        credential_repo = LocalIdentityProvider(db_session).credential_repo
        assert await credential_repo.get_by_email("taken@example.com") is None

    @pytest.mark.asyncio
    async def test_register_short_password(self, auth_service: AuthService):
        with pytest.raises(BadRequestError):
            await auth_service.register("short@example.com", "abc", "Shorty")

    @pytest.mark.asyncio
    async def test_login_success(self, auth_service: AuthService, test_user: User):
        user, session = await auth_service.login("user@test.com", TEST_PASSWORD)

        assert user.id == test_user.id
        assert session.access_token
        assert session.refresh_token
        assert session.token_type == "bearer"
        assert session.expires_in == 3600

    @pytest.mark.asyncio
    async def test_login_invalid_credentials(self, auth_service: AuthService, test_user: User):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login("user@test.com", "wrong-password")

    @pytest.mark.asyncio
    async def test_login_without_profile(self, auth_service: AuthService, db_session):
        await LocalIdentityProvider(db_session).sign_up("orphan@example.com", TEST_PASSWORD)

        with pytest.raises(BadRequestError, match="Failed to fetch user profile"):
            await auth_service.login("orphan@example.com", TEST_PASSWORD)

    @pytest.mark.asyncio
    async def test_get_current_user_reads_role_fresh(self, auth_service: AuthService, test_user: User):
        _, session = await auth_service.login("user@test.com", TEST_PASSWORD)
        await auth_service.change_role("user@test.com", UserRole.ADMIN)

        user = await auth_service.get_current_user(session.access_token)

        assert user.role == UserRole.ADMIN

    @pytest.mark.asyncio
    async def test_get_current_user_invalid_token(self, auth_service: AuthService):
        with pytest.raises(InvalidTokenError):
            await auth_service.get_current_user("not-a-jwt")

    @pytest.mark.asyncio
    async def test_get_current_user_without_profile(self, auth_service: AuthService, db_session):
        provider = LocalIdentityProvider(db_session)
        await provider.sign_up("ghost@example.com", TEST_PASSWORD)
        _, session = await provider.sign_in("ghost@example.com", TEST_PASSWORD)

        with pytest.raises(UnauthorizedError, match="User profile not found"):
            await auth_service.get_current_user(session.access_token)

    @pytest.mark.asyncio
    async def test_refresh_session(self, auth_service: AuthService, test_user: User):
        _, session = await auth_service.login("user@test.com", TEST_PASSWORD)

        user, refreshed = await auth_service.refresh_session(session.refresh_token)

        assert user.id == test_user.id
        assert refreshed.access_token

    @pytest.mark.asyncio
    async def test_refresh_rejects_access_token(self, auth_service: AuthService, test_user: User):
        _, session = await auth_service.login("user@test.com", TEST_PASSWORD)

        with pytest.raises(InvalidTokenError):
            await auth_service.refresh_session(session.access_token)

    @pytest.mark.asyncio
    async def test_change_role_unknown_email(self, auth_service: AuthService):
        with pytest.raises(NotFoundError):
            await auth_service.change_role("nobody@example.com", UserRole.ADMIN)


class TestListingService:
    """Test ListingService functionality."""

    @pytest.mark.asyncio
    async def test_create_forces_pending_and_caller_ownership(self, listing_service: ListingService, test_owner: User):
        data = ListingCreate.model_validate(ListingFactory.create_listing_data(
            status="verified",
            owner_id=str(uuid.uuid4()),
            latitude=1.0,
            longitude=2.0
        ))

        listing = await listing_service.create_listing(data, test_owner)

        assert listing.status == ListingStatus.PENDING
        assert listing.owner_id == test_owner.id
        assert listing.latitude == TEST_LATITUDE
        assert listing.longitude == TEST_LONGITUDE

    @pytest.mark.asyncio
    async def test_create_requires_owner_or_admin(self, listing_service: ListingService, test_user: User):
        data = ListingCreate.model_validate(ListingFactory.create_listing_data())

        with pytest.raises(InsufficientPermissionsError):
            await listing_service.create_listing(data, test_user)

    @pytest.mark.asyncio
    async def test_create_survives_geocoding_failure(self, db_session, test_admin: User):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"status": "UNKNOWN_ERROR"})

        service = ListingService(db_session, geocoder=make_geocoder(handler))
        data = ListingCreate.model_validate(ListingFactory.create_listing_data())

        listing = await service.create_listing(data, test_admin)

        assert listing.latitude is None
        assert listing.longitude is None
        assert listing.owner_id == test_admin.id

    @pytest.mark.asyncio
    async def test_search_forces_verified_and_reports_has_more(
        self, listing_service: ListingService, db_session, test_owner: User
    ):
        for i in range(3):
            await ListingFactory.create_listing(db_session, test_owner, title=f"Verified {i}")
        await ListingFactory.create_listing(db_session, test_owner, status=ListingStatus.PENDING)

        filters = ListingSearchFilters(status=ListingStatus.PENDING)
        full_page, has_more = await listing_service.search_listings(filters, page=1, limit=3)
        last_page, last_has_more = await listing_service.search_listings(ListingSearchFilters(), page=2, limit=2)

        assert len(full_page) == 3
        assert all(l.status == ListingStatus.VERIFIED for l in full_page)
        assert has_more is True
        assert len(last_page) == 1
        assert last_has_more is False

    @pytest.mark.asyncio
    async def test_search_rejects_bad_paging(self, listing_service: ListingService):
        with pytest.raises(ValidationError):
            await listing_service.search_listings(ListingSearchFilters(), page=0)
        with pytest.raises(ValidationError):
            await listing_service.search_listings(ListingSearchFilters(), limit=0)

    @pytest.mark.asyncio
    async def test_get_listing_detail(
        self, listing_service: ListingService, db_session, verified_listing: Listing,
        test_user: User, test_admin: User
    ):
        await ReviewFactory.create_review(db_session, test_user, verified_listing, rating=4)
        await ReviewFactory.create_review(db_session, test_admin, verified_listing, rating=5)

        detail = await listing_service.get_listing(verified_listing.id)

        assert detail["owner"]["name"] == "Test Owner"
        assert detail["total_reviews"] == 2
        assert detail["average_rating"] == 4.5
        assert [r["rating"] for r in detail["reviews"]] == [5, 4]

    @pytest.mark.asyncio
    async def test_get_listing_hides_pending(self, listing_service: ListingService, pending_listing: Listing):
        with pytest.raises(ListingNotFoundError):
            await listing_service.get_listing(pending_listing.id)

    @pytest.mark.asyncio
    async def test_update_partial_keeps_status(
        self, listing_service: ListingService, verified_listing: Listing, test_owner: User
    ):
        updated = await listing_service.update_listing(
            verified_listing.id, ListingUpdate(rent=17000), test_owner
        )

        assert updated.rent == 17000
        assert updated.title == "Verified Listing"
        assert updated.status == ListingStatus.VERIFIED
        # Address untouched, so no geocoding
        assert updated.latitude is None

    @pytest.mark.asyncio
    async def test_update_address_regeocodes(
        self, listing_service: ListingService, verified_listing: Listing, test_owner: User
    ):
        updated = await listing_service.update_listing(
            verified_listing.id, ListingUpdate(address="42 Residency Road"), test_owner
        )

        assert updated.address == "42 Residency Road"
        assert (updated.latitude, updated.longitude) == (TEST_LATITUDE, TEST_LONGITUDE)

    @pytest.mark.asyncio
    async def test_update_empty_payload(
        self, listing_service: ListingService, verified_listing: Listing, test_owner: User
    ):
        with pytest.raises(ValidationError):
            await listing_service.update_listing(verified_listing.id, ListingUpdate(), test_owner)

    @pytest.mark.asyncio
    async def test_update_by_non_owner_is_not_found(
        self, listing_service: ListingService, verified_listing: Listing, other_owner: User
    ):
        with pytest.raises(ListingNotFoundError):
            await listing_service.update_listing(verified_listing.id, ListingUpdate(rent=1), other_owner)

    @pytest.mark.asyncio
    async def test_admin_cannot_update_someone_elses_listing(
        self, listing_service: ListingService, verified_listing: Listing, test_admin: User
    ):
        with pytest.raises(ListingNotFoundError):
            await listing_service.update_listing(verified_listing.id, ListingUpdate(rent=1), test_admin)

    @pytest.mark.asyncio
    async def test_delete(self, listing_service: ListingService, db_session, verified_listing: Listing, test_owner: User):
        listing_id = verified_listing.id
        await listing_service.delete_listing(listing_id, test_owner)

        assert await ListingRepository(db_session).get_by_id(listing_id, refresh=True) is None

    @pytest.mark.asyncio
    async def test_delete_by_non_owner_is_not_found(
        self, listing_service: ListingService, verified_listing: Listing, other_owner: User
    ):
        with pytest.raises(ListingNotFoundError):
            await listing_service.delete_listing(verified_listing.id, other_owner)

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_someone_elses_listing(
        self, listing_service: ListingService, db_session, verified_listing: Listing, test_admin: User
    ):
        listing_id = verified_listing.id

        with pytest.raises(ListingNotFoundError):
            await listing_service.delete_listing(listing_id, test_admin)

        assert await ListingRepository(db_session).get_by_id(listing_id, refresh=True) is not None


class TestFavoriteService:
    """Test FavoriteService functionality."""

    @pytest.mark.asyncio
    async def test_add_and_list(self, favorite_service: FavoriteService, test_user: User, verified_listing: Listing):
        favorite = await favorite_service.add_favorite(verified_listing.id, test_user)
        favorites = await favorite_service.list_favorites(test_user)

        assert favorite.listing_id == verified_listing.id
        assert [f.id for f in favorites] == [favorite.id]

    @pytest.mark.asyncio
    async def test_add_twice_conflicts(self, favorite_service: FavoriteService, test_user: User, verified_listing: Listing):
        await favorite_service.add_favorite(verified_listing.id, test_user)

        with pytest.raises(DuplicateResourceError, match="Already in favorites"):
            await favorite_service.add_favorite(verified_listing.id, test_user)

    @pytest.mark.asyncio
    async def test_add_requires_verified_listing(
        self, favorite_service: FavoriteService, test_user: User, pending_listing: Listing
    ):
        with pytest.raises(ListingNotFoundError, match="not verified"):
            await favorite_service.add_favorite(pending_listing.id, test_user)

        with pytest.raises(ListingNotFoundError):
            await favorite_service.add_favorite(uuid.uuid4(), test_user)

    @pytest.mark.asyncio
    async def test_remove_is_idempotent(self, favorite_service: FavoriteService, test_user: User, verified_listing: Listing):
        await favorite_service.remove_favorite(verified_listing.id, test_user)
        await favorite_service.add_favorite(verified_listing.id, test_user)
        await favorite_service.remove_favorite(verified_listing.id, test_user)

        assert await favorite_service.list_favorites(test_user) == []


class TestReviewService:
    """Test ReviewService functionality."""

    @pytest.mark.asyncio
    async def test_create_on_any_status(self, review_service: ReviewService, test_user: User, pending_listing: Listing):
        review = await review_service.create_review(
            pending_listing.id, ReviewCreate(rating=3, comment=""), test_user
        )

        assert review.rating == 3
        assert review.comment is None

    @pytest.mark.asyncio
    async def test_create_missing_listing(self, review_service: ReviewService, test_user: User):
        with pytest.raises(ListingNotFoundError):
            await review_service.create_review(uuid.uuid4(), ReviewCreate(rating=3), test_user)

    @pytest.mark.asyncio
    async def test_create_twice_conflicts(self, review_service: ReviewService, test_user: User, verified_listing: Listing):
        await review_service.create_review(verified_listing.id, ReviewCreate(rating=4), test_user)

        with pytest.raises(DuplicateResourceError, match="already reviewed"):
            await review_service.create_review(verified_listing.id, ReviewCreate(rating=3), test_user)

    @pytest.mark.asyncio
    async def test_list_reviews_average(
        self, review_service: ReviewService, db_session, verified_listing: Listing, test_user: User,
        test_owner: User, test_admin: User
    ):
        for user, rating in [(test_user, 4), (test_owner, 4), (test_admin, 5)]:
            await ReviewFactory.create_review(db_session, user, verified_listing, rating=rating)

        reviews, average, total = await review_service.list_reviews(verified_listing.id)

        assert total == 3
        assert average == 4.3
        assert len(reviews) == 3

    @pytest.mark.asyncio
    async def test_list_reviews_empty(self, review_service: ReviewService, verified_listing: Listing):
        reviews, average, total = await review_service.list_reviews(verified_listing.id)
        assert (reviews, average, total) == ([], 0, 0)

    @pytest.mark.asyncio
    async def test_update_keeps_omitted_comment(
        self, review_service: ReviewService, db_session, test_user: User, verified_listing: Listing
    ):
        await ReviewFactory.create_review(db_session, test_user, verified_listing, rating=2, comment="Noisy")

        updated = await review_service.update_review(verified_listing.id, ReviewUpdate(rating=3), test_user)

        assert updated.rating == 3
        assert updated.comment == "Noisy"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("comment", [None, ""])
    async def test_update_clears_comment(
        self, review_service: ReviewService, db_session, test_user: User, verified_listing: Listing, comment
    ):
        await ReviewFactory.create_review(db_session, test_user, verified_listing, comment="Noisy")

        updated = await review_service.update_review(
            verified_listing.id, ReviewUpdate.model_validate({"comment": comment}), test_user
        )

        assert updated.comment is None

    @pytest.mark.asyncio
    async def test_update_without_review(self, review_service: ReviewService, test_user: User, verified_listing: Listing):
        with pytest.raises(NotFoundError, match="Review not found"):
            await review_service.update_review(verified_listing.id, ReviewUpdate(rating=5), test_user)

    @pytest.mark.asyncio
    async def test_update_empty_payload(self, review_service: ReviewService, test_user: User, verified_listing: Listing):
        with pytest.raises(ValidationError):
            await review_service.update_review(verified_listing.id, ReviewUpdate(), test_user)

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(
        self, review_service: ReviewService, db_session, test_user: User, verified_listing: Listing
    ):
        await ReviewFactory.create_review(db_session, test_user, verified_listing)

        await review_service.delete_review(verified_listing.id, test_user)
        await review_service.delete_review(verified_listing.id, test_user)

        reviews, _, total = await review_service.list_reviews(verified_listing.id)
        assert total == 0


class TestAdminService:
    """Test AdminService functionality."""

    @pytest.mark.asyncio
    async def test_moderation_requires_admin(self, admin_service: AdminService, test_owner: User, pending_listing: Listing):
        with pytest.raises(InsufficientPermissionsError):
            await admin_service.moderate_listing("verify", pending_listing.id, test_owner)
        with pytest.raises(InsufficientPermissionsError):
            await admin_service.list_pending(test_owner)
        with pytest.raises(InsufficientPermissionsError):
            await admin_service.get_analytics(test_owner)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action,status", [("verify", ListingStatus.VERIFIED), ("block", ListingStatus.BLOCKED)])
    async def test_moderate(self, admin_service: AdminService, test_admin: User, pending_listing: Listing, action, status):
        listing = await admin_service.moderate_listing(action, pending_listing.id, test_admin)
        assert listing.status == status

    @pytest.mark.asyncio
    async def test_moderate_unknown_action(self, admin_service: AdminService, test_admin: User, pending_listing: Listing):
        with pytest.raises(InvalidStatusActionError):
            await admin_service.moderate_listing("pending", pending_listing.id, test_admin)

    @pytest.mark.asyncio
    async def test_moderate_missing_listing(self, admin_service: AdminService, test_admin: User):
        with pytest.raises(ListingNotFoundError):
            await admin_service.moderate_listing("verify", uuid.uuid4(), test_admin)

    @pytest.mark.asyncio
    async def test_list_pending(self, admin_service: AdminService, test_admin: User, pending_listing: Listing, verified_listing: Listing):
        listings = await admin_service.list_pending(test_admin)
        assert [l.id for l in listings] == [pending_listing.id]

    @pytest.mark.asyncio
    async def test_analytics_average_rent(self, admin_service: AdminService, db_session, test_admin: User, test_owner: User):
        for rent in (10000, 20000, 30000):
            await ListingFactory.create_listing(db_session, test_owner, rent=rent)
        await ListingFactory.create_listing(db_session, test_owner, status=ListingStatus.PENDING, rent=99000)

        analytics = await admin_service.get_analytics(test_admin)

        assert analytics["average_rent"] == 20000
        assert analytics["totals"]["listings"] == 4
        assert analytics["totals"]["pending_listings"] == 1
        assert analytics["popular_cities"] == [{"city": "Bengaluru", "count": 3}]
        assert analytics["property_type_distribution"] == {"1bhk": 3}

    @pytest.mark.asyncio
    async def test_analytics_empty(self, admin_service: AdminService, test_admin: User):
        analytics = await admin_service.get_analytics(test_admin)

        assert analytics["average_rent"] == 0
        assert analytics["popular_cities"] == []
        assert analytics["property_type_distribution"] == {}
