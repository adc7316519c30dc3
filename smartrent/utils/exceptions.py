"""
Exception hierarchy for the SmartRent API.

Each class fixes an HTTP status and a machine-readable error code; services raise
them and ErrorHandlerService renders them into the common error envelope.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """
    Base class for errors that map directly onto an HTTP response.

    Subclasses set `http_status`, `code` and `default_detail`; callers may
    override the message per raise.
    """

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "API_ERROR"
    default_detail: str = "Request failed"

    def __init__(
        self,
        detail: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=self.http_status,
            detail=detail or self.default_detail,
            headers=headers
        )
        self.error_code = self.code


# 400
class BadRequestError(APIException):
    http_status = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"
    default_detail = "Bad request"


class ValidationError(APIException):
    """Semantic validation failure, optionally with per-field messages."""

    http_status = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    default_detail = "Request validation failed"

    def __init__(self, detail: Optional[str] = None, field_errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(detail)
        self.field_errors = field_errors or []


class InvalidStatusActionError(BadRequestError):
    """Moderation action other than verify or block."""

    def __init__(self, action: str):
        super().__init__("Invalid action. Use verify or block")
        self.action = action


# 401
class UnauthorizedError(APIException):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    default_detail = "Authorization required"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class InvalidCredentialsError(UnauthorizedError):
    default_detail = "Invalid email or password"


class InvalidTokenError(UnauthorizedError):
    default_detail = "Invalid token"


class TokenExpiredError(UnauthorizedError):
    default_detail = "Token has expired"


# 403
class ForbiddenError(APIException):
    http_status = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_detail = "Access forbidden"


class InsufficientPermissionsError(ForbiddenError):
    """Role is not allowed to perform an Action."""

    def __init__(self, action: str):
        super().__init__(f"Insufficient permissions to {action}")


# 404
class NotFoundError(APIException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Optional[str] = None, detail: Optional[str] = None):
        if detail is None:
            detail = f"{resource} not found"
            if resource_id:
                detail += f" with ID: {resource_id}"
        super().__init__(detail)


class ListingNotFoundError(NotFoundError):
    """Listing is absent, not visible to the caller, or not theirs to change."""

    def __init__(self, listing_id: Optional[str] = None, detail: Optional[str] = None):
        super().__init__("Listing", listing_id, detail=detail)


# 409
class ConflictError(APIException):
    http_status = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_detail = "Resource conflict"


class DuplicateResourceError(ConflictError):
    """A uniqueness rule (email, favorite, review) was hit."""


# 500
class InternalServerError(APIException):
    code = "INTERNAL_SERVER_ERROR"
    default_detail = "Internal server error"
