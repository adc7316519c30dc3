"""
Renders every failure into the SmartRent error envelope:

    {"error": {"code", "message", "timestamp", "request_id", "details"?}}

The request id is the one RequestLoggingMiddleware put on request.state, so the
body and the X-Request-ID header agree.
"""

from typing import Dict, Any, Optional, List, Sequence
from datetime import datetime, timezone
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from smartrent.repositories.base import is_unique_violation
from smartrent.utils.exceptions import APIException, ValidationError
import logging
import uuid

logger = logging.getLogger(__name__)

# Substrings of driver messages -> readable constraint explanation
CONSTRAINT_HINTS = (
    ("foreign key", "Referenced record does not exist"),
    ("not null", "Required field cannot be empty"),
    ("check constraint", "Value does not meet validation requirements"),
)


class ErrorHandlerService:
    """Static helpers used by the exception handlers in smartrent.main and by the middleware."""

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Build the error envelope.

        Args:
            error_code: Machine-readable code such as NOT_FOUND
            message: Human-readable message
            details: Per-field entries, only for validation failures
            request_id: Id of the failing request

        Returns:
            Envelope dictionary; `details` is omitted when empty
        """
        body: Dict[str, Any] = {
            "code": error_code,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }
        if request_id:
            body["request_id"] = request_id
        if details:
            body["details"] = details
        return {"error": body}

    @staticmethod
    def handle_api_exception(exception: APIException, request: Optional[Request] = None) -> JSONResponse:
        """Render one of our own exceptions with its status, code and headers."""
        request_id = _request_id(request)
        logger.warning(
            f"[{request_id}] {exception.status_code} {exception.error_code}: {exception.detail}",
            extra={"request_id": request_id, "path": _path(request)}
        )

        details = exception.field_errors if isinstance(exception, ValidationError) else None
        return _respond(
            exception.status_code,
            exception.error_code,
            exception.detail,
            request_id,
            details=details,
            headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(
        errors: Sequence[Dict[str, Any]],
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Render request or pydantic validation errors as 400 with one detail per field.

        Args:
            errors: Output of `.errors()` on a RequestValidationError or pydantic ValidationError
            request: Failing request, if any
        """
        request_id = _request_id(request)
        details = [
            {
                "field": " -> ".join(str(part) for part in error.get("loc", ())),
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "value_error"),
            }
            for error in errors
        ]
        logger.warning(
            f"[{request_id}] validation failed on {len(details)} field(s)",
            extra={"request_id": request_id, "path": _path(request), "validation_errors": details}
        )
        return _respond(400, "VALIDATION_ERROR", "Request validation failed", request_id, details=details)

    @staticmethod
    def handle_database_error(exception: SQLAlchemyError, request: Optional[Request] = None) -> JSONResponse:
        """
        Render a database error that escaped the services.

        Integrity violations become 409 CONFLICT; anything else is 500 DATABASE_ERROR.
        """
        request_id = _request_id(request)

        if isinstance(exception, IntegrityError):
            status_code, code = 409, "CONFLICT"
            hint = ErrorHandlerService._extract_constraint_info(exception)
            message = f"Constraint violation: {hint}" if hint else "Data integrity constraint violation"
        else:
            status_code, code, message = 500, "DATABASE_ERROR", "Database operation failed"

        logger.error(
            f"[{request_id}] {type(exception).__name__}: {exception}",
            extra={"request_id": request_id, "path": _path(request)},
            exc_info=True
        )
        return _respond(status_code, code, message, request_id)

    @staticmethod
    def handle_http_exception(
        exception: StarletteHTTPException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Framework errors such as unknown routes (404) or wrong methods (405)."""
        request_id = _request_id(request)
        logger.warning(
            f"[{request_id}] HTTP {exception.status_code}: {exception.detail}",
            extra={"request_id": request_id, "path": _path(request)}
        )
        return _respond(
            exception.status_code,
            f"HTTP_{exception.status_code}",
            str(exception.detail),
            request_id,
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_unexpected_error(exception: Exception, request: Optional[Request] = None) -> JSONResponse:
        """Anything else is a 500 whose message is the underlying error text."""
        request_id = _request_id(request)
        logger.error(
            f"[{request_id}] unhandled {type(exception).__name__}: {exception}",
            extra={"request_id": request_id, "path": _path(request)},
            exc_info=exception
        )
        return _respond(
            500,
            "INTERNAL_SERVER_ERROR",
            str(exception) or "An unexpected error occurred",
            request_id
        )

    @staticmethod
    def _extract_constraint_info(exception: IntegrityError) -> Optional[str]:
        if is_unique_violation(exception):
            return "Duplicate value for unique field"

        message = str(exception.orig).lower()
        for needle, hint in CONSTRAINT_HINTS:
            if needle in message:
                return hint
        return None


def _request_id(request: Optional[Request]) -> str:
    if request is not None:
        request_id = getattr(request.state, "request_id", None)
        if request_id:
            return request_id
    return uuid.uuid4().hex[:8]


def _path(request: Optional[Request]) -> Optional[str]:
    return request.url.path if request is not None else None


def _respond(
    status_code: int,
    code: str,
    message: str,
    request_id: str,
    details: Optional[List[Dict[str, Any]]] = None,
    headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    content = ErrorHandlerService.format_error_response(code, message, details=details, request_id=request_id)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content), headers=headers)
