import json
import re
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _parse_cors_origins(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, list):
        items = [str(v).strip() for v in raw]
        return [v for v in items if v]

    raw = str(raw).strip()
    if not raw or raw == "[]":
        return []
    if raw == "*":
        return ["*"]

    # JSON is the documented format; comma/space separated lists are accepted too.
    if raw.startswith("["):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            items = [str(v).strip() for v in parsed]
            return [v for v in items if v]

    origins: list[str] = []
    for part in (p for p in re.split(r"[,\s]+", raw) if p):
        if part == "*":
            return ["*"]
        if part not in origins:
            origins.append(part)
    return origins


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    """

    # Debug mode - enables detailed error responses
    debug: bool = False

    # Database (SQLite for development, PostgreSQL+asyncpg in production)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./warroom.db", validation_alias="DATABASE_URL"
    )
    db_pool_size: int = 20
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 300

    # Mentionlytics (social listening provider)
    mentionlytics_api_token: str = Field(
        default="", validation_alias="MENTIONLYTICS_TOKEN"
    )
    mentionlytics_base_url: str = "https://api.mentionlytics.com/v1/"
    mentionlytics_timeout: float = 30.0  # Per-attempt timeout in seconds
    mentionlytics_retries: int = 3  # Total attempts, not additional retries
    mentionlytics_retry_delay: float = 1.0  # Backoff base in seconds

    # HTTP Client connection pool settings
    httpx_connect_timeout: float = 10.0
    httpx_read_timeout: float = 30.0
    httpx_write_timeout: float = 10.0
    httpx_pool_timeout: float = 5.0
    httpx_keepalive_expiry: float = 30.0
    httpx_max_connections: int = 100
    httpx_max_keepalive_connections: int = 20

    # Rate limiting settings
    outbound_rate_limit: int = 100  # Outbound calls per window, shared by the process
    api_rate_limit: int = 100  # Inbound requests per window, per client
    login_rate_limit: int = 5  # Attempts per window for credential-style endpoints
    rate_limit_window_seconds: int = 60
    rate_limit_sweep_interval: int = 900  # 15 minutes

    # Cache settings
    cache_default_ttl: int = 300  # 5 minutes
    cache_fallback_ttl: int = 120  # Mock data is kept for 2 minutes
    cache_sweep_interval: int = 600  # 10 minutes

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    cors_origins: Annotated[list[str], NoDecode] = ["*"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def decode_cors_origins(cls, v: Any) -> list[str]:
        return _parse_cors_origins(v)

    @field_validator(
        "outbound_rate_limit",
        "api_rate_limit",
        "login_rate_limit",
        "rate_limit_window_seconds",
        "mentionlytics_retries",
    )
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """Validate counters and windows are positive."""
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @field_validator(
        "mentionlytics_timeout",
        "httpx_connect_timeout",
        "httpx_read_timeout",
        "httpx_write_timeout",
        "httpx_pool_timeout",
    )
    @classmethod
    def validate_timeout_positive(cls, v: float) -> float:
        """Validate timeout values are positive."""
        if v <= 0:
            raise ValueError("Timeout values must be positive")
        return v

    @field_validator("mentionlytics_retry_delay")
    @classmethod
    def validate_retry_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("mentionlytics_retry_delay must not be negative")
        return v

    @field_validator("cache_sweep_interval", "rate_limit_sweep_interval")
    @classmethod
    def validate_sweep_interval(cls, v: int) -> int:
        """Validate sweep intervals are reasonable."""
        if v < 10:
            raise ValueError("sweep intervals should be at least 10 seconds")
        if v > 86400:
            raise ValueError("sweep intervals should not exceed one day")
        return v

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", populate_by_name=True
    )


# Global settings instance
settings = Settings()
