"""
Configuration management using Pydantic settings.
Handles database URL, identity provider keys, geocoding and environment variables.
"""

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings
from typing import Optional, List
from functools import lru_cache


DEFAULT_DATABASE_URL = "postgresql+asyncpg://postgres:postgres@db:5432/smartrent"
DEFAULT_JWT_SECRET = "your-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings with Docker environment variable support."""

    # Application configuration
    app_name: str = "SmartRent API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    testing: bool = False
    log_level: str = "INFO"

    # Individual database components for flexibility
    postgres_db: str = "smartrent"
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "db"
    postgres_port: int = 5432

    # Database configuration - Docker-compatible defaults
    database_url: str = DEFAULT_DATABASE_URL

    # Connection pool (ignored for SQLite)
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_pool_recycle: int = 3600  # seconds
    db_pool_timeout: int = 30  # seconds

    # Identity provider: "local" issues its own JWTs, "supabase" delegates to GoTrue
    identity_provider: str = "local"
    identity_timeout: float = 10.0

    # JWT configuration (local identity provider)
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    jwt_refresh_token_expire_days: int = 7

    # Hosted identity provider
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    supabase_service_role_key: Optional[str] = None

    # Geocoding
    google_maps_api_key: Optional[str] = None
    geocoding_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    geocoding_timeout: float = 10.0

    # API configuration
    api_v1_prefix: str = "/api/v1"
    cors_origins: List[str] = ["*"]
    max_request_size: int = 1024 * 1024  # 1MB

    # Pagination defaults
    default_page_size: int = 12
    max_page_size: int = 100

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("database_url", mode="before")
    @classmethod
    def ensure_async_driver(cls, v):
        """Ensure the async driver is used for PostgreSQL URLs."""
        if v and v.startswith("postgres://"):
            v = v.replace("postgres://", "postgresql://", 1)
        if v and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @field_validator("identity_provider")
    @classmethod
    def validate_identity_provider(cls, v):
        """Validate identity provider name."""
        allowed = ["local", "supabase"]
        if v.lower() not in allowed:
            raise ValueError(f"Identity provider must be one of: {allowed}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        return v.upper()

    @model_validator(mode="after")
    def validate_required_credentials(self):
        """Build the database URL from components and check provider credentials."""
        if self.database_url == DEFAULT_DATABASE_URL:
            self.database_url = (
                f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
                f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
            )

        if self.identity_provider == "supabase":
            if not self.supabase_url:
                raise ValueError("SUPABASE_URL is required when IDENTITY_PROVIDER=supabase")
            if not (self.supabase_anon_key or self.supabase_service_role_key):
                raise ValueError("SUPABASE_ANON_KEY or SUPABASE_SERVICE_ROLE_KEY is required")

        if self.identity_provider == "local":
            if not self.jwt_secret_key:
                raise ValueError("JWT_SECRET_KEY is required")
            if self.environment == "production" and self.jwt_secret_key == DEFAULT_JWT_SECRET:
                raise ValueError("JWT_SECRET_KEY must be changed in production")
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing" or self.testing

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def supabase_api_key(self) -> Optional[str]:
        """Key sent as the `apikey` header to the hosted identity provider."""
        return self.supabase_service_role_key or self.supabase_anon_key

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one instance of settings throughout the app lifecycle.
    """
    return Settings()


# Global settings instance
settings = get_settings()
