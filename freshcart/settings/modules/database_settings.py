from __future__ import annotations

from pydantic_settings import SettingsConfigDict

from freshcart.settings.base import FreshCartBaseSettings


class DatabaseSettings(FreshCartBaseSettings):
    """
    Database configuration settings.

    Loaded from ``DB_*`` environment variables or the .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="DB_", extra="ignore")

    # Database URL (sqlite+aiosqlite for development, postgresql+asyncpg in production)
    url: str = "sqlite+aiosqlite:///./freshcart.db"

    # Connection pool settings (ignored for SQLite)
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 3600  # 1 hour

    # Echo SQL (for debugging)
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")
