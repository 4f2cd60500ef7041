"""
Centralized configuration for the Scribe backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., RAZORPAY_*, SUPABASE_*).
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

MIN_JWT_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Scribe API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Storage: "supabase" for production, "memory" for tests and local dev
    storage_backend: Literal["supabase", "memory"] = "supabase"

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_db_url: str = ""  # Direct Postgres URL, used by run_migrations.py

    # Session tokens
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    token_ttl_days: int = 30

    # Entitlements
    free_trial_limit: int = 10
    subscription_days: int = 30
    entitlement_cache_ttl: int = 180  # seconds
    entitlement_cache_maxsize: int = 10_000

    # Razorpay (payment gateway)
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    razorpay_api_url: str = "https://api.razorpay.com/v1"
    payment_http_timeout: float = 30.0
    payment_http_retries: int = 3

    # Text transformation (OpenAI via LangChain)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    llm_max_tokens: int = 2000
    llm_max_retries: int = 2
    llm_timeout: float = 60.0

    # Rate limiting (requests per window, window in seconds)
    rate_limit_enabled: bool = True
    rate_limit_auth_requests: int = 5
    rate_limit_auth_window: int = 15 * 60
    rate_limit_api_requests: int = 100
    rate_limit_api_window: int = 15 * 60
    rate_limit_payment_requests: int = 10
    rate_limit_payment_window: int = 60 * 60
    rate_limit_read_requests: int = 30
    rate_limit_read_window: int = 60


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


def validate_settings(settings: Settings) -> None:
    """
    Check settings that the API cannot run without.

    Raises:
        RuntimeError: If a required value is missing or malformed
    """
    missing = []
    if not settings.jwt_secret:
        missing.append("JWT_SECRET")
    if settings.storage_backend == "supabase":
        if not settings.supabase_url:
            missing.append("SUPABASE_URL")
        if not settings.supabase_service_role_key:
            missing.append("SUPABASE_SERVICE_ROLE_KEY")

    if missing:
        raise RuntimeError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    if len(settings.jwt_secret) < MIN_JWT_SECRET_LENGTH:
        logger.warning(
            f"JWT_SECRET should be at least {MIN_JWT_SECRET_LENGTH} characters long for production"
        )

    if not settings.razorpay_key_id or not settings.razorpay_key_secret:
        logger.warning("Razorpay credentials not configured; payment endpoints will fail")

    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not configured; text transformation endpoints will fail")
