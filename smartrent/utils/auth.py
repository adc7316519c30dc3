"""
JWT helpers for the built-in identity provider.

Tokens carry `sub`, `email`, `type`, `iat` and `exp`. The role is deliberately
absent: it is read from the users table on every request.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from smartrent.config import settings
import uuid

ACCESS = "access"
REFRESH = "refresh"


class TokenPayload:
    """Decoded, validated token claims."""

    def __init__(self, user_id: str, email: str, token_type: str, exp: datetime):
        self.user_id = user_id
        self.email = email
        self.token_type = token_type
        self.exp = exp

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenPayload":
        return cls(
            user_id=data["sub"],
            email=data["email"],
            token_type=data.get("type", ACCESS),
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc)
        )


def _issue(user_id: uuid.UUID, email: str, token_type: str, lifetime: timedelta) -> str:
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "email": email,
        "type": token_type,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Issue a short-lived access token.

    Args:
        user_id: Identity UUID, also the users.id of the profile
        email: Identity email address
        expires_delta: Lifetime override, ACCESS_TOKEN_EXPIRE_MINUTES by default
    """
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    return _issue(user_id, email, ACCESS, lifetime)


def create_refresh_token(
    user_id: uuid.UUID,
    email: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    lifetime = expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    return _issue(user_id, email, REFRESH, lifetime)


def verify_token(token: str, token_type: str = ACCESS) -> TokenPayload:
    """
    Decode a token and check its type and required claims.

    Raises:
        ExpiredSignatureError: If the token has expired (a JWTError subclass)
        JWTError: For any other signature, format, type or claim problem
    """
    payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])

    if payload.get("type") != token_type:
        raise JWTError(f"Invalid token type. Expected {token_type}")
    if not payload.get("sub") or not payload.get("email"):
        raise JWTError("Invalid token payload")

    return TokenPayload.from_dict(payload)
