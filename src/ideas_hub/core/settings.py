"""Application settings and configuration.

This module defines all configuration options for the Ideas Hub application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Ideas Hub", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Owner credential; an empty token means nobody holds owner rights
    api_token: str = Field(default="", alias="API_TOKEN")

    # Which interaction classes are open to non-owner callers
    public_likes: bool = Field(default=True, alias="PUBLIC_LIKES")
    public_comments: bool = Field(default=False, alias="PUBLIC_COMMENTS")

    # Realtime stream tuning
    heartbeat_interval_seconds: float = Field(default=15.0, alias="HEARTBEAT_INTERVAL_SECONDS")
    sse_retry_ms: int = Field(default=5000, alias="SSE_RETRY_MS")
    subscriber_queue_size: int = Field(default=200, alias="SUBSCRIBER_QUEUE_SIZE")

    # Optional JSON snapshot of the idea list
    data_file: str | None = Field(default=None, alias="DATA_FILE")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["Authorization", "Content-Type", "X-Api-Token", "X-User-Id", "X-User-Name"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def owner_enabled(self) -> bool:
        """Return True when an owner token is configured."""
        return bool(self.api_token)


settings = Settings()
