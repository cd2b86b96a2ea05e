"""
Application configuration using environment variables.
"""
import os
import secrets
from functools import lru_cache
from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Personal Blog API"
    debug: bool = False
    environment: str = "development"

    # Database
    database_url: str = "sqlite:///./blog.db"
    auto_create_tables: bool = True

    # Sessions
    session_secret: str = os.getenv("SESSION_SECRET", secrets.token_urlsafe(32))
    algorithm: str = "HS256"
    session_max_age_hours: int = 168  # 7 days
    oauth_state_ttl_minutes: int = 10

    # Session cookie
    cookie_name: str = "session_id"
    cookie_domain: Optional[str] = None
    cookie_secure: bool = False
    cookie_http_only: bool = True
    cookie_same_site: str = "lax"

    # OAuth
    oauth_base_url: str = "http://localhost:8080"
    oauth_frontend_url: str = "http://localhost:5173"
    admin_emails: List[str] = []

    google_client_id: str = ""
    google_client_secret: str = ""
    google_enabled: bool = False

    github_client_id: str = ""
    github_client_secret: str = ""
    github_enabled: bool = False

    vk_client_id: str = ""
    vk_client_secret: str = ""
    vk_enabled: bool = False

    # Media
    media_upload_path: str = "./uploads"
    media_base_url: str = "http://localhost:8080"
    max_upload_size: int = 10 * 1024 * 1024  # 10 MB

    # Profile
    profile_name: str = "Blog Author"
    profile_description: str = "Personal blog"
    profile_cache_ttl_seconds: int = 300

    # CORS
    cors_enabled: bool = True
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 60
    rate_limit_cleanup_interval_seconds: int = 60
    login_rate_limit: str = "10/minute"

    # Reverse proxy: trust X-Forwarded-For / X-Forwarded-Proto only from these peers
    proxy_headers_enabled: bool = False
    forwarded_allow_ips: List[str] = ["127.0.0.1"]

    # Background jobs
    session_cleanup_interval_seconds: int = 3600
    session_cleanup_timeout_seconds: int = 30

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @field_validator("oauth_base_url", "oauth_frontend_url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("must start with http:// or https://")
        return value.rstrip("/")

    @field_validator("cookie_same_site")
    @classmethod
    def validate_same_site(cls, value: str) -> str:
        value = value.lower()
        if value not in ("lax", "strict", "none"):
            raise ValueError("must be one of: lax, strict, none")
        return value

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_max_age_hours * 3600


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Validate session secret on startup
settings = get_settings()
if settings.environment == "production" and not os.getenv("SESSION_SECRET"):
    raise ValueError(
        "SESSION_SECRET must be set in production! "
        "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
    )
