# storefront/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized storefront settings loaded from environment.

    Optional env vars (.env):
      - API_BASE_URL (upstream AutoParts REST API, including /api/v1)
      - API_TIMEOUT_SECONDS
      - DATABASE_URL (durable client-state storage; SQLite file by default)
      - CLIENT_COOKIE_NAME (cookie that identifies one browser)
      - DEFAULT_LOCALE ("en" | "sw")
    """

    PROJECT_NAME: str = "AutoParts Kenya Storefront"
    API_V1_STR: str = "/api/v1"

    # Upstream REST API
    API_BASE_URL: str = "http://localhost:8000/api/v1"
    API_TIMEOUT_SECONDS: float = 15.0

    # Client-state storage
    DATABASE_URL: str = "sqlite:///./storefront.db"

    # One cookie per browser; every persisted store is scoped to it
    CLIENT_COOKIE_NAME: str = "autoparts_client"
    CLIENT_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 365

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    DEFAULT_LOCALE: str = "en"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
