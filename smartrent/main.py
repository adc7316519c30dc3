"""
SmartRent API application: routers, middleware, exception handlers and health endpoints.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from smartrent.config import settings
from smartrent.database import check_database_connection, close_db_connection
from smartrent.routers import (
    auth_router,
    listings_router,
    favorites_router,
    reviews_router,
    admin_router
)
from smartrent.utils.exceptions import APIException
from smartrent.services.error_handler import ErrorHandlerService
from smartrent.middleware import RequestLoggingMiddleware


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )
    # uvicorn logs every request itself; ours already carry the request id
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"Starting {settings.app_name} v{settings.app_version} "
        f"({settings.environment}, identity provider: {settings.identity_provider})"
    )
    if not settings.google_maps_api_key:
        logger.warning("GOOGLE_MAPS_API_KEY not set; listings will be stored without coordinates")
    if not await check_database_connection():
        logger.error("Database unreachable at startup; requests will fail until it recovers")

    yield

    logger.info("Shutting down")
    await close_db_connection()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Property rental marketplace API.

    * **Listings**: search verified listings by location, rent, type, occupancy and furnishing
    * **Owners**: create and manage listings; new listings wait for admin verification
    * **Favorites** and **Reviews** for signed-in users
    * **Admin**: moderation queue, verify/block and dashboard analytics

    Authenticate through `/api/v1/auth` and send `Authorization: Bearer <access_token>`.
    """,
    openapi_tags=[
        {"name": "Authentication", "description": "Signup, login and token refresh"},
        {"name": "Listings", "description": "Listing search and owner management"},
        {"name": "Favorites", "description": "Saved listings"},
        {"name": "Reviews", "description": "Listing ratings and comments"},
        {"name": "Admin", "description": "Moderation and analytics"},
        {"name": "Health", "description": "Service health"}
    ],
    lifespan=lifespan,
)

app.add_middleware(
    RequestLoggingMiddleware,
    api_prefix=settings.api_v1_prefix,
    max_request_size=settings.max_request_size,
    enable_request_logging=not settings.is_testing
)

# Outermost middleware, so preflights and error responses carry CORS headers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    expose_headers=["X-Request-ID", "X-Processing-Time"],
)

for router in (auth_router, listings_router, favorites_router, reviews_router, admin_router):
    app.include_router(router, prefix=settings.api_v1_prefix)


async def _api_error(request: Request, exc: APIException):
    return ErrorHandlerService.handle_api_exception(exc, request)


async def _validation_error(request: Request, exc: RequestValidationError):
    return ErrorHandlerService.handle_validation_error(exc.errors(), request)


async def _database_error(request: Request, exc: SQLAlchemyError):
    return ErrorHandlerService.handle_database_error(exc, request)


async def _http_error(request: Request, exc: StarletteHTTPException):
    return ErrorHandlerService.handle_http_exception(exc, request)


async def _unexpected_error(request: Request, exc: Exception):
    return ErrorHandlerService.handle_unexpected_error(exc, request)


# Only request parsing errors map to 400; other pydantic errors are 500s
for exc_class, handler in (
    (APIException, _api_error),
    (RequestValidationError, _validation_error),
    (SQLAlchemyError, _database_error),
    (StarletteHTTPException, _http_error),
    (Exception, _unexpected_error),
):
    app.add_exception_handler(exc_class, handler)


@app.get("/", tags=["Health"])
async def root():
    """Service banner with links to the interactive docs."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.environment,
        "status": "healthy",
        "documentation": {
            "swagger_ui": app.docs_url,
            "redoc": app.redoc_url,
            "openapi_json": app.openapi_url
        },
        "api_prefix": settings.api_v1_prefix
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness plus a database round trip; 503 when the database is unreachable."""
    if not await check_database_connection():
        raise HTTPException(status_code=503, detail="Database connection failed")

    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "database": "connected"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("smartrent.main:app", host=settings.host, port=settings.port, reload=settings.debug)
