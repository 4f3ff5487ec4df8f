from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables or .env file.
    """

    # Supabase / PostgREST settings
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = ""

    # HTTP Client connection pool settings
    httpx_timeout: float = 30.0
    httpx_connect_timeout: float = 10.0
    httpx_read_timeout: float = 30.0
    httpx_write_timeout: float = 10.0
    httpx_pool_timeout: float = 5.0
    httpx_keepalive_expiry: float = 30.0
    httpx_max_connections: int = 20
    httpx_max_keepalive_connections: int = 10

    # Rate limiting settings
    rate_limit_cleanup_interval_seconds: int = 300  # Sweep stale buckets every 5 minutes
    rate_limit_entry_max_age_seconds: int = 600  # Drop buckets idle for 10 minutes
    rate_limit_auto_cleanup: bool = True
    rate_limit_wait_max_attempts: int = 30
    rate_limit_wait_max_seconds: float = 120.0
    rate_limit_remote_retry_after_seconds: int = 60

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "text"  # text | structured | json

    @field_validator(
        "rate_limit_cleanup_interval_seconds",
        "rate_limit_entry_max_age_seconds",
        "rate_limit_wait_max_attempts",
        "rate_limit_remote_retry_after_seconds",
    )
    @classmethod
    def validate_rate_limit_positive(cls, v: int) -> int:
        """Validate rate limit values are positive."""
        if v < 1:
            raise ValueError("Rate limit values must be at least 1")
        return v

    @field_validator(
        "httpx_timeout",
        "httpx_connect_timeout",
        "httpx_read_timeout",
        "rate_limit_wait_max_seconds",
    )
    @classmethod
    def validate_timeout_positive(cls, v: float) -> float:
        """Validate timeout values are positive."""
        if v <= 0:
            raise ValueError("Timeout values must be positive")
        return v

    @field_validator("supabase_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Global settings instance
settings = Settings()
