"""
Configuration management for Aero CMS.

This module centralizes environment-driven configuration using Pydantic's
`BaseSettings`. All services consume the shared `settings` instance to ensure
consistent configuration across the stack.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import AnyUrl, Field, PositiveInt, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration sourced from environment variables."""

    # General application settings
    API_TITLE: str = "Aero CMS"
    API_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = Field("development", pattern=r"^(development|staging|production)$")
    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])
    LOG_LEVEL: str = "INFO"

    # Security / auth
    SECRET_KEY: str = "changeme"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    PASSWORDLESS_TOKEN_EXPIRE_MINUTES: int = 15
    # Echo magic-link tokens in the HTTP response; local development only
    PASSWORDLESS_TOKEN_IN_RESPONSE: bool = False
    PASSWORD_HASH_ITERATIONS: PositiveInt = 260_000
    ALLOWED_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None

    # Database connections
    MONGODB_URL: AnyUrl = Field("mongodb://localhost:27017")
    MONGODB_DATABASE: str = "aerocms"
    REDIS_URL: AnyUrl = Field("redis://localhost:6379/0")

    # Media storage
    STORAGE_BACKEND: str = Field("disk", pattern=r"^(disk|s3)$")
    MEDIA_ROOT: Path = Field(default_factory=lambda: Path("wwwroot") / "media")
    MEDIA_URL_PREFIX: str = "/media"
    MAX_UPLOAD_BYTES: PositiveInt = 10 * 1024 * 1024
    ALLOWED_MEDIA_EXTENSIONS: List[str] = Field(
        default_factory=lambda: [
            ".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg",
            ".pdf", ".docx", ".xlsx", ".mp4", ".mp3", ".zip",
        ]
    )
    S3_BUCKET_NAME: Optional[str] = None
    S3_REGION: Optional[str] = None
    S3_ENDPOINT_URL: Optional[AnyUrl] = None
    S3_PUBLIC_URL: Optional[str] = None

    # Content delivery
    REDIRECT_CACHE_SECONDS: int = 300
    DELIVERY_CACHE_SECONDS: int = 60
    ERROR_PAGE_PATH: str = "/error"
    BLOG_PAGE_SIZE: PositiveInt = 10

    # Monitoring / tracing
    ENABLE_TRACING: bool = False
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[AnyUrl] = None
    OTEL_EXPORTER_OTLP_HEADERS: Optional[str] = None

    # Rate limiting
    RATE_LIMIT_PER_MINUTE: int = 120

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @field_validator("ALLOWED_ORIGINS", mode="before")
    def _split_origins(cls, value: str | List[str]) -> List[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("ALLOWED_MEDIA_EXTENSIONS", mode="before")
    def _split_extensions(cls, value: str | List[str]) -> List[str]:
        if isinstance(value, str):
            value = [item.strip() for item in value.split(",") if item.strip()]
        return [item.lower() if item.startswith(".") else f".{item.lower()}" for item in value or []]


@lru_cache()
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()


# Singleton-style settings instance for modules that prefer direct access.
settings = get_settings()
