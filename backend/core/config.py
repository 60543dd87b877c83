"""Application settings loaded from the environment."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "postboard"
    app_env: str = "local"
    database_url: str = "sqlite+aiosqlite:///./postboard.db"

    jwt_secret_key: str = "change-me-in-production-with-32-bytes-or-more"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    allow_insecure_http_cookies: bool = False

    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    # Upper bound on read-modify-write attempts for a single post mutation.
    post_write_max_attempts: int = 5

    redis_url: str | None = None
    rate_limit_requests: int = 20
    rate_limit_window_seconds: int = 60


settings = Settings()
