"""Application configuration via Pydantic Settings."""

from typing import Dict
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Minimum number of deals a list run must find before stale cleanup is trusted
DEFAULT_CLEANUP_MIN_DEALS: Dict[str, int] = {
    "djaksport": 10,
    "planeta": 10,
    "nsport": 5,
    "sportvision": 10,
    "buzz": 10,
    "officeshoes": 10,
    "intersport": 10,
    "trefsport": 5,
}


class Settings(BaseSettings):
    """Global pipeline settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./akcija.db"

    @model_validator(mode="after")
    def fix_database_url(self) -> "Settings":
        """Hosted Postgres URLs come as postgresql:// but asyncpg needs postgresql+asyncpg://"""
        url = self.DATABASE_URL
        if url.startswith("postgresql://"):
            self.DATABASE_URL = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            self.DATABASE_URL = url.replace("postgres://", "postgresql+asyncpg://", 1)
        return self

    # App
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Deal filtering
    MIN_DISCOUNT_PERCENT: int = 50

    # Browser / HTTP
    HEADLESS: bool = True
    NAVIGATION_TIMEOUT_MS: int = 60000
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Politeness delays (seconds)
    BROWSER_DELAY_MIN: float = 1.0
    BROWSER_DELAY_MAX: float = 5.0
    HTTP_DELAY_MIN: float = 0.5
    HTTP_DELAY_MAX: float = 1.5
    DETAIL_DELAY_MIN: float = 1.5
    DETAIL_DELAY_MAX: float = 3.0

    # Stale cleanup floors per store, e.g. CLEANUP_MIN_DEALS='{"nsport": 3}'
    CLEANUP_MIN_DEALS: Dict[str, int] = {}
    CLEANUP_DEFAULT_MIN_DEALS: int = 10

    # Detail pass
    DETAIL_COMMIT_BATCH: int = 10
    DETAIL_MAX_AGE_HOURS: int = 0  # 0 disables age-based refresh

    # Scheduling
    SCHEDULE_CRON: str = "0 4 * * *"
    SCHEDULE_TIMEZONE: str = "Europe/Belgrade"

    def get_cleanup_threshold(self, store: str) -> int:
        """Resolve the stale-cleanup floor for a store.

        Args:
            store: Store slug (e.g. "djaksport")

        Returns:
            Minimum deals a run must report before stale rows are deleted
        """
        if store in self.CLEANUP_MIN_DEALS:
            return self.CLEANUP_MIN_DEALS[store]
        return DEFAULT_CLEANUP_MIN_DEALS.get(store, self.CLEANUP_DEFAULT_MIN_DEALS)


settings = Settings()
