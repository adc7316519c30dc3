"""
Request middleware: request ids, access logging and basic request checks.
"""

from typing import Callable
from fastapi import Request, Response
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time
import uuid

from smartrent.services.error_handler import ErrorHandlerService
from smartrent.utils.exceptions import APIException, BadRequestError

logger = logging.getLogger(__name__)

WRITE_METHODS = ("POST", "PUT", "PATCH")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Assigns every request an 8-character id and logs request/response lines.

    Write requests to the API are rejected with 400 when the body is too large
    or is not JSON. OPTIONS requests that are not CORS preflights get a plain
    200 "ok". The id is returned as X-Request-ID and reused in error bodies.
    """

    def __init__(
        self,
        app: ASGIApp,
        api_prefix: str = "/api/",
        max_request_size: int = 1024 * 1024,  # 1MB
        enable_request_logging: bool = True
    ):
        super().__init__(app)
        self.api_prefix = api_prefix
        self.max_request_size = max_request_size
        self.enable_request_logging = enable_request_logging

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request through the middleware.

        Args:
            request: FastAPI request object
            call_next: Next middleware/handler in chain

        Returns:
            Response object
        """
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        start_time = time.time()

        try:
            self._validate_request_size(request)
            self._validate_content_type(request)

            if self.enable_request_logging:
                self._log_request(request, request_id)

            if request.method == "OPTIONS":
                # CORS preflights never get here; any other OPTIONS is answered directly
                response = PlainTextResponse("ok")
            else:
                response = await call_next(request)
        except APIException as exc:
            response = ErrorHandlerService.handle_api_exception(exc, request)
        except Exception as exc:
            logger.error(
                f"Unhandled error [{request_id}]: {type(exc).__name__} - {str(exc)}",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "method": request.method
                },
                exc_info=True
            )
            response = ErrorHandlerService.handle_unexpected_error(exc, request)

        processing_time = time.time() - start_time
        if self.enable_request_logging:
            self._log_response(request, response, request_id, processing_time)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = f"{processing_time:.4f}"
        return response

    def _validate_request_size(self, request: Request) -> None:
        """
        Validate request content length.

        Raises:
            BadRequestError: If request size exceeds limit
        """
        content_length = request.headers.get("content-length")
        if not content_length:
            return

        try:
            size = int(content_length)
        except ValueError:
            raise BadRequestError("Invalid content-length header")

        if size > self.max_request_size:
            raise BadRequestError(
                f"Request size {size} bytes exceeds maximum allowed size {self.max_request_size} bytes"
            )

    def _validate_content_type(self, request: Request) -> None:
        """
        Require JSON bodies on API writes. Bodyless writes (no content type) pass.

        Raises:
            BadRequestError: If a write carries a non-JSON body
        """
        if request.method not in WRITE_METHODS or not request.url.path.startswith(self.api_prefix):
            return

        content_type = request.headers.get("content-type", "")
        if content_type and not content_type.startswith("application/json"):
            raise BadRequestError(
                f"Unsupported content type '{content_type}'. Expected 'application/json'"
            )

    @staticmethod
    def _get_client_ip(request: Request) -> str:
        # Check for forwarded headers (load balancer/proxy)
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        return request.client.host if request.client else "unknown"

    def _log_request(self, request: Request, request_id: str) -> None:
        logger.info(
            f"Request [{request_id}]: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "query_params": str(request.query_params),
                "client_ip": self._get_client_ip(request),
                "user_agent": request.headers.get("user-agent", "unknown")
            }
        )

    def _log_response(
        self,
        request: Request,
        response: Response,
        request_id: str,
        processing_time: float
    ) -> None:
        logger.info(
            f"Response [{request_id}]: {response.status_code} - {processing_time:.3f}s",
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "processing_time": processing_time,
                "path": request.url.path,
                "method": request.method
            }
        )
