"""
Authentication API endpoints for signup, login, token refresh and the current profile.
"""

from fastapi import APIRouter, Depends, status
from smartrent.models.user import User, UserRole
from smartrent.services.auth import AuthService
from smartrent.schemas.auth import (
    SignupRequest,
    SignupResponse,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    SessionResponse,
    CurrentUserResponse
)
from smartrent.schemas.user import UserResponse
from smartrent.utils.dependencies import get_auth_service, get_current_user
from smartrent.schemas.error import get_error_responses


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
    description="Register as a user or an owner",
    responses=get_error_responses(400, 409, 500)
)
async def signup(
    signup_data: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> SignupResponse:
    """
    Register a new account.

    Args:
        signup_data: Email, password, name, optional phone and role
        auth_service: Authentication service

    Returns:
        Created profile

    Raises:
        DuplicateResourceError: If the email is already registered
    """
    user = await auth_service.register(
        email=signup_data.email,
        password=signup_data.password,
        name=signup_data.name,
        phone=signup_data.phone,
        role=UserRole(signup_data.role)
    )

    return SignupResponse(
        message="User created successfully",
        user=UserResponse.model_validate(user.to_dict())
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with email and password, returns bearer tokens",
    responses=get_error_responses(400, 401, 500)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    """
    Authenticate user and return a session.

    Raises:
        InvalidCredentialsError: If credentials are invalid
        BadRequestError: If the account has no profile
    """
    user, session = await auth_service.login(
        email=login_data.email,
        password=login_data.password
    )

    return LoginResponse(
        message="Login successful",
        user=UserResponse.model_validate(user.to_dict()),
        session=SessionResponse(**session.to_dict())
    )


@router.post(
    "/refresh",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Refresh session",
    description="Exchange a refresh token for new tokens",
    responses=get_error_responses(400, 401, 500)
)
async def refresh_session(
    refresh_data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    user, session = await auth_service.refresh_session(refresh_data.refresh_token)

    return LoginResponse(
        message="Session refreshed",
        user=UserResponse.model_validate(user.to_dict()),
        session=SessionResponse(**session.to_dict())
    )


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    status_code=status.HTTP_200_OK,
    summary="Current user",
    description="Profile of the authenticated caller",
    responses=get_error_responses(401, 500)
)
async def get_me(current_user: User = Depends(get_current_user)) -> CurrentUserResponse:
    return CurrentUserResponse(user=UserResponse.model_validate(current_user.to_dict()))
