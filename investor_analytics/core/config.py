import warnings

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    APP_ENV: str = "development"
    APP_DEBUG: bool = True
    APP_VERSION: str | None = None  # e.g. "1.2.3" or git SHA, used as Sentry release tag
    FRONTEND_URL: str = "http://localhost:5173"
    ENABLE_DEBUG_ROUTES: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    ENABLE_REQUEST_LOGGING: bool = True

    # ERP (upstream accounting system)
    ERP_BASE_URL: str = ""
    ERP_API_KEY: str = ""
    ERP_CLIENT_ID: str = ""
    ERP_TIMEOUT_SECONDS: float = 30.0
    ERP_CACHE_TTL_SECONDS: int = 300
    ERP_USE_MOCKS: bool = False
    ERP_PAGE_SIZE: int = 200
    ERP_MAX_PAGES: int = 50

    # Snapshot cache
    SNAPSHOT_CACHE_PROVIDER: str = "memory"  # "memory" | "redis"
    REDIS_URL: str = ""
    SNAPSHOT_CACHE_TTL_SECONDS: int = 600
    # Bump to invalidate every stored snapshot after a payload shape change
    SNAPSHOT_CACHE_VERSION: str = "1"

    # Sentry error monitoring: set SENTRY_DSN to enable; no-op when unset
    SENTRY_DSN: str | None = None
    SENTRY_ENVIRONMENT: str = "development"

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "Settings":
        if self.APP_ENV == "production":
            if self.ERP_USE_MOCKS or not self.ERP_BASE_URL:
                warnings.warn(
                    "ERP_BASE_URL not set in production, serving mock ERP data",
                    stacklevel=2,
                )
            if self.SNAPSHOT_CACHE_PROVIDER == "memory":
                warnings.warn(
                    "In-process snapshot cache in production; entries are not shared between workers",
                    stacklevel=2,
                )
            if self.ENABLE_DEBUG_ROUTES:
                warnings.warn("ENABLE_DEBUG_ROUTES is on in production", stacklevel=2)
        return self


settings = Settings()
