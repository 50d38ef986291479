"""Application configuration using Pydantic Settings.

Configuration is loaded from environment variables. Optionally, point
`ENV_FILE` at a local env file for development.
"""

from __future__ import annotations

import os
from enum import Enum

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class Settings(BaseSettings):
    """
    Application settings with type validation.

    Configuration is loaded from environment variables, with support
    for an explicit env file in development.
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="", extra="ignore"
    )

    # Application
    app_env: AppEnvironment = AppEnvironment.LOCAL
    app_name: str = "dsl-builder-api"
    app_log_level: str = "INFO"

    # Observability
    observability_enabled: bool = True
    observability_structured_logs: bool = True
    observability_request_id_header: str = "X-Request-ID"

    # Metrics token for protecting /metrics endpoint (open when unset outside prod)
    metrics_token: str | None = None

    # CORS Configuration
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://localhost:8080"

    # DSL generation
    # Indentation used by the serializer for the pretty-printed document
    dsl_indent: int = 2
    # When enabled, condition values are checked against their comparison type
    # before a document is assembled. Off by default: values pass through verbatim.
    dsl_strict_values: bool = False

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(v.lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("dsl_indent")
    @classmethod
    def validate_dsl_indent(cls, v: int) -> int:
        """Indentation must be a small positive number of spaces."""
        if v < 1 or v > 8:
            raise ValueError(f"dsl_indent must be between 1 and 8, got {v}")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> Settings:
        """
        Validate production-specific settings.

        These checks prevent insecure configurations from being deployed to production.
        """
        if self.app_env == AppEnvironment.PROD:
            if not self.metrics_token:
                raise ValueError("METRICS_TOKEN must be set in production")

            for origin in self.cors_origins_list:
                if "localhost" in origin or "127.0.0.1" in origin:
                    raise ValueError(
                        f"CORS origins must not contain localhost in production: {origin}"
                    )

        return self


settings = Settings()
