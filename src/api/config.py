"""
API Configuration
Environment-driven settings for the remittance API process.
Source: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

import json
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """
    Settings for the HTTP process: runtime mode, logging, server binding
    and CORS.

    Envelope identifiers used when generating 835s are separate, see
    src.core.config.EDISettings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============================================================================
    # Runtime
    # ============================================================================
    ENVIRONMENT: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Deployment mode; production disables the docs UI"
    )
    DEBUG: bool = Field(default=False, description="FastAPI debug flag")
    LOG_LEVEL: str = Field(default="INFO", description="loguru level name")
    LOG_FILE: str | None = Field(default=None, description="Rotating log file, disabled when unset")
    SERVICE_NAME: str = Field(default="edi-835-api", description="Reported by /health")

    # ============================================================================
    # HTTP Server
    # ============================================================================
    API_TITLE: str = Field(default="EDI 835 Remittance API", description="OpenAPI title")
    API_VERSION: str = Field(default="1.0.0", description="OpenAPI version")
    API_HOST: str = Field(default="0.0.0.0", description="Bind address")  # nosec B104
    API_PORT: int = Field(default=8000, description="Bind port")
    MAX_EDI_CONTENT_LENGTH: int = Field(
        default=1_000_000,
        gt=0,
        description="Largest 835 text accepted by the validate and parse endpoints",
    )

    # Browser clients (the claim entry form) call the API cross-origin
    CORS_ORIGINS: list[str] = Field(
        default=["http://localhost:4200", "http://localhost:3000"],
        description="Allowed origins",
    )
    CORS_CREDENTIALS: bool = Field(default=True)
    CORS_METHODS: list[str] = Field(default=["*"])
    CORS_HEADERS: list[str] = Field(default=["*"])

    @staticmethod
    def _split_list(value: Any) -> Any:
        """Accept a JSON array or a comma-separated string."""
        if not isinstance(value, str):
            return value

        text = value.strip()
        if text.startswith("["):
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                return parsed
        return [item.strip() for item in text.split(",") if item.strip()]

    @field_validator("CORS_ORIGINS", "CORS_METHODS", "CORS_HEADERS", mode="before")
    @classmethod
    def split_cors_lists(cls, v: Any) -> Any:
        return cls._split_list(v)

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_testing(self) -> bool:
        return self.ENVIRONMENT == "testing"


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()


# Module-level instance; prefer get_settings() in new code
settings = get_settings()
