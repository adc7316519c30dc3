"""
Error body schemas, used to document failure responses in the OpenAPI schema.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict, Tuple


class ErrorDetail(BaseModel):
    """One failed field of a validation error."""

    field: Optional[str] = Field(None, examples=["body -> rating"])
    message: str = Field(..., examples=["Input should be less than or equal to 5"])
    type: Optional[str] = Field(None, examples=["less_than_equal"])


class ErrorBody(BaseModel):
    code: str = Field(..., description="Machine-readable error code", examples=["NOT_FOUND"])
    message: str = Field(..., examples=["Listing not found"])
    timestamp: str = Field(..., description="UTC time of the failure", examples=["2024-06-01T09:30:00Z"])
    request_id: Optional[str] = Field(
        None,
        description="Same value as the X-Request-ID response header",
        examples=["3f9c1a2b"]
    )
    details: Optional[List[ErrorDetail]] = Field(
        None,
        description="Present on validation errors only"
    )


class APIErrorResponse(BaseModel):
    """Envelope every error is returned in."""

    error: ErrorBody


# status -> (description, [(example name, code, message)])
_ERROR_CATALOGUE: Dict[int, Tuple[str, List[Tuple[str, str, str]]]] = {
    400: ("Malformed request", [
        ("validation", "VALIDATION_ERROR", "Request validation failed"),
        ("bad_action", "BAD_REQUEST", "Invalid action. Use verify or block"),
    ]),
    401: ("Missing or rejected bearer token", [
        ("missing", "UNAUTHORIZED", "Authorization required"),
        ("invalid", "UNAUTHORIZED", "Invalid token"),
    ]),
    403: ("Role does not allow this action", [
        ("forbidden", "FORBIDDEN", "Insufficient permissions to moderate listings"),
    ]),
    404: ("Listing missing, not visible or not yours", [
        ("not_found", "NOT_FOUND", "Listing not found"),
    ]),
    409: ("Uniqueness conflict", [
        ("favorite", "CONFLICT", "Already in favorites"),
        ("review", "CONFLICT", "You have already reviewed this listing"),
    ]),
    500: ("Unexpected server or database failure", [
        ("database", "DATABASE_ERROR", "Database operation failed"),
    ]),
}


def _openapi_entry(description: str, examples: List[Tuple[str, str, str]]) -> Dict[str, Any]:
    rendered = {
        name: {
            "summary": message,
            "value": {
                "error": {
                    "code": code,
                    "message": message,
                    "timestamp": "2024-06-01T09:30:00Z",
                    "request_id": "3f9c1a2b",
                }
            },
        }
        for name, code, message in examples
    }
    return {
        "description": description,
        "model": APIErrorResponse,
        "content": {"application/json": {"examples": rendered}},
    }


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Build the `responses=` mapping for a route.

    Args:
        status_codes: HTTP status codes the route can fail with

    Returns:
        OpenAPI response entries keyed by status code
    """
    return {
        code: _openapi_entry(*_ERROR_CATALOGUE[code])
        for code in status_codes
        if code in _ERROR_CATALOGUE
    }


def get_public_error_responses() -> Dict[int, Dict[str, Any]]:
    """Failures of the unauthenticated read routes."""
    return get_error_responses(400, 404, 500)


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    return get_error_responses(400, 401, 403, 404, 409, 500)
