from urllib.parse import quote_plus

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Slow Query Log API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Database ────────────────────────────────────────────────────────────
    # The four connection values the service has always been configured with.
    # DB_PORT is optional and defaults to the standard PostgreSQL port.
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_NAME: str = "postgres"

    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    # Per-statement timeout enforced by asyncpg. A timed out query surfaces as
    # an error, never as an empty page.
    DB_COMMAND_TIMEOUT_SECONDS: float = 30.0

    # ── Pagination ──────────────────────────────────────────────────────────
    # 0 = no cap. page_size is unbounded unless this is set.
    MAX_PAGE_SIZE: int = 0

    # ── HTTP ────────────────────────────────────────────────────────────────
    # Lifetime of cached GET /slow-queries responses. 0 disables the cache.
    CACHE_TTL_SECONDS: int = 1800
    # Upper bound on cached pages; the oldest is evicted first. 0 disables the cache.
    CACHE_MAX_ENTRIES: int = 256
    RATE_LIMIT: str = "60/minute"
    RATE_LIMIT_ENABLED: bool = True

    # Comma-separated string of allowed CORS origins. Empty = CORS disabled.
    ALLOWED_ORIGINS: str = ""

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def DATABASE_URL(self) -> str:
        return (
            f"postgresql+asyncpg://{quote_plus(self.DB_USER)}:{quote_plus(self.DB_PASSWORD)}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @field_validator("DB_HOST", "DB_USER", "DB_NAME")
    @classmethod
    def db_fields_must_not_be_empty(cls, v: str, info) -> str:
        if not v.strip():
            raise ValueError(f"{info.field_name} is required and must not be empty")
        return v

    @field_validator("DB_COMMAND_TIMEOUT_SECONDS")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(
                f"DB_COMMAND_TIMEOUT_SECONDS must be greater than 0. Got: {v}"
            )
        return v

    @field_validator("MAX_PAGE_SIZE", "CACHE_TTL_SECONDS", "CACHE_MAX_ENTRIES", "DB_MAX_OVERFLOW")
    @classmethod
    def must_not_be_negative(cls, v: int, info) -> int:
        if v < 0:
            raise ValueError(f"{info.field_name} must not be negative. Got: {v}")
        return v

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def pool_size_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"DB_POOL_SIZE must be at least 1. Got: {v}")
        return v


settings = Settings()
