from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Environment mode: dev or prod
    ENV: Literal["dev", "prod"] = "dev"

    # Database
    DATABASE_URL: str
    DB_POOL_TIMEOUT_SECONDS: int = 10
    DB_STATEMENT_TIMEOUT_MS: int = 15_000
    RUN_MIGRATIONS: bool = True

    # Sync endpoint shared secret (unset = every sync is rejected)
    SYNC_PASSWORD: str | None = None

    # Rate limits (requests per window, per client)
    SYNC_RATE_LIMIT_PER_MINUTE: int = 10
    READ_RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_WINDOW_SECONDS: int = 60

    # Quote providers
    EXCHANGE_RATE_URL: str = "https://api.exchangerate-api.com/v4/latest/USD"
    PRICE_API_URL: str = "https://api.coingecko.com/api/v3/simple/price"
    ASSET_PRICE_IDS: dict[str, str] = {"BTC": "bitcoin", "GOLD": "tether-gold"}
    FALLBACK_USDTHB_RATE: float = 33.5
    QUOTE_TIMEOUT_SECONDS: float = 10.0

    # Projections
    DEFAULT_PROJECTION_YEARS: int = 5
    MIN_PROJECTION_YEARS: int = 1
    MAX_PROJECTION_YEARS: int = 30

    CORS_ORIGINS: list[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True
    SLACK_WEBHOOK_URL: str | None = None

    # Docs Configuration
    DOCS_ENABLED: bool | None = None  # Override docs setting (None = auto based on ENV)

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # ignore unrelated keys in local .env
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        # Heroku-style URLs are rejected by SQLAlchemy 2.x
        if value.startswith("postgres://"):
            return value.replace("postgres://", "postgresql://", 1)
        return value

    @field_validator("ASSET_PRICE_IDS")
    @classmethod
    def _upper_symbols(cls, value: dict[str, str]) -> dict[str, str]:
        return {symbol.upper(): provider_id for symbol, provider_id in value.items()}

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENV == "prod"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENV == "dev"

    @property
    def debug_enabled(self) -> bool:
        """Debug mode is only enabled in development."""
        return self.is_development

    @property
    def effective_log_level(self) -> str:
        """Return appropriate log level based on environment."""
        if self.is_production:
            # In production, minimum INFO level (ignore DEBUG)
            return self.LOG_LEVEL if self.LOG_LEVEL.upper() != "DEBUG" else "INFO"
        return self.LOG_LEVEL

    @property
    def docs_enabled(self) -> bool:
        """Swagger/ReDoc docs enabled based on environment or override."""
        if self.DOCS_ENABLED is not None:
            return self.DOCS_ENABLED
        return self.is_development


settings = Settings()
