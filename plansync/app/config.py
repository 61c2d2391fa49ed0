"""
PlanSync Configuration Management
Centralized settings using Pydantic Settings with environment variable support.

ENVIRONMENT VARIABLES REFERENCE
===============================

All settings can be configured via environment variables (uppercase, underscore-separated).
Example: `api_host` -> `API_HOST`

APPLICATION SETTINGS:
--------------------
ENVIRONMENT             - Runtime environment: development|staging|production (default: "development")
DEBUG                   - Enable debug mode (default: false)
EXPOSE_ERROR_DETAILS    - Expose detailed errors in responses (default: false, MUST be false in prod)
LOG_LEVEL               - Logging level: DEBUG|INFO|WARNING|ERROR|CRITICAL (default: "INFO")

API CONFIGURATION:
-----------------
API_HOST                - API bind host (default: "0.0.0.0")
API_PORT                - API bind port (default: 8000)
ENABLE_API_DOCS         - Enable /docs and /redoc endpoints (default: true)
CORS_ORIGINS            - Allowed CORS origins as JSON array (default: ["http://localhost:5173"])

MIGRATION:
----------
MAX_IMPORT_SIZE_BYTES   - Max size of a JSON snapshot accepted for import (default: 10000000)
SNAPSHOT_VERSION        - Version stamped into exported snapshots (default: "1.0")

HIERARCHY:
----------
HIERARCHY_LOG_DIAGNOSTICS - Log orphan/duplicate/cycle warnings while building trees (default: true)
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings loaded from environment variables.
    Supports .env file loading in development.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ============================================
    # Application Settings
    # ============================================
    app_name: str = Field(
        default="plansync-service",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Runtime environment"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    expose_error_details: bool = Field(
        default=False,
        description="Expose detailed error messages in API responses. Should be False in production."
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )

    # ============================================
    # API Configuration
    # ============================================
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000, ge=1024, le=65535, description="Default port for plansync-service")
    enable_api_docs: bool = Field(
        default=True,
        description="Enable OpenAPI documentation (/docs and /redoc endpoints)"
    )

    # CORS settings
    cors_origins: List[str] = Field(
        default=["http://localhost:5173"],
        description="Allowed CORS origins. Wildcard '*' is NOT allowed when credentials=true."
    )
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: List[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        description="Allowed HTTP methods for CORS."
    )
    cors_allow_headers: List[str] = Field(
        default=["Content-Type", "Authorization", "X-Request-ID"],
        description="Allowed HTTP headers for CORS."
    )

    @field_validator('cors_origins')
    @classmethod
    def validate_cors_no_wildcard_with_credentials(cls, v: List[str]) -> List[str]:
        """Browsers block credentialed requests when the allowed origin is '*'."""
        if '*' in v and len(v) == 1:
            raise ValueError(
                "CORS wildcard '*' is not allowed with credentials. "
                "Set CORS_ORIGINS to explicit origins."
            )
        return v

    # ============================================
    # Migration (export/import) Configuration
    # ============================================
    max_import_size_bytes: int = Field(
        default=10_000_000,
        ge=1_000,
        le=100_000_000,
        description="Maximum size in bytes of a JSON snapshot accepted for import validation"
    )
    snapshot_version: str = Field(
        default="1.0",
        min_length=1,
        description="Version string written into exported snapshots"
    )

    # ============================================
    # Hierarchy Configuration
    # ============================================
    hierarchy_log_diagnostics: bool = Field(
        default=True,
        description="Log warnings for orphan promotion, duplicate ids and unreachable nodes"
    )

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use LRU cache to avoid reloading environment variables.
    """
    return Settings()


# Convenience export
settings = get_settings()
