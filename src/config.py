"""Application configuration loaded from environment variables and .env file."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./dev.db"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Content catalog
    ITEMS_DATA_PATH: str = "src/data/items.json"
    LOOT_TABLES_DATA_PATH: str = "src/data/loot_tables.json"

    # Loot generation
    LOOT_SEED: Optional[int] = None
    RARITY_BONUS_PER_FLOOR: float = 0.02
    STAT_MODE: str = "declared"


settings = Settings()
