"""Configuration."""

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Box-Designer"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./box_designer.db"

    # Saved setups live under one schema-versioned key
    saved_setups_key: str = "box_setups_v3"

    # Manual pricing defaults (CNY)
    default_per_kg_cny: Decimal = Decimal("50")
    default_min_charge_cny: Decimal = Decimal("0")
    default_cny_per_usd: Decimal = Decimal("7.20")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
