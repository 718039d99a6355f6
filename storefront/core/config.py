# storefront/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres in production, sqlite for local/tests)
      - JWT_SECRET (HS256 secret used by the identity provider)
      - CARD_ENCRYPTION_KEY (urlsafe base64 Fernet key)

    Optional:
      - CVC_HASH_ROUNDS (bcrypt cost factor)
      - PAYMENT_AUTHORIZER (only "simulated" exists)
      - ENABLE_TEST_UTILITIES (unlocks expected-CVC lookup, never on in prod)
    """

    PROJECT_NAME: str = "GreenShoes Storefront"
    API_V1_STR: str = "/api/v1"

    # DB config
    DATABASE_URL: str
    DB_ECHO: bool = False

    # JWT verification (backend-side)
    JWT_SECRET: str
    JWT_ALG: str = "HS256"

    # Card vault
    CARD_ENCRYPTION_KEY: str
    CVC_HASH_ROUNDS: int = 12
    PAYMENT_AUTHORIZER: str = "simulated"
    ENABLE_TEST_UTILITIES: bool = False

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
