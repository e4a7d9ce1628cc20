"""
Settings for the salon inventory service.

Each group reads its own environment prefix (``STORAGE_``, ``INVENTORY_``,
``API_``); top-level values come from the environment or a ``.env`` file.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where the SQLite database lives and how it is pooled."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "salon_inventory.db"
    pool_size: int = Field(default=5, ge=1)
    busy_timeout: int = Field(default=30000, ge=0, description="SQLite busy timeout in ms")

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class InventorySettings(BaseSettings):
    """Expiry windows, FIFO retry policy and batch numbering."""

    model_config = SettingsConfigDict(env_prefix="INVENTORY_")

    critical_days: int = Field(default=7, ge=0)
    expiring_soon_days: int = Field(default=30, ge=0)
    default_days_ahead: int = Field(default=30, ge=0)

    fifo_max_retries: int = Field(default=3, ge=0)
    fifo_retry_delay: float = Field(default=0.05, ge=0)

    # Used when a delivery has no purchase order id to number batches from
    batch_number_prefix: str = "PO"

    @model_validator(mode="after")
    def check_expiry_windows(self) -> "InventorySettings":
        if self.critical_days > self.expiring_soon_days:
            raise ValueError("critical_days must not exceed expiring_soon_days")
        return self


class APISettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Salon Inventory"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    storage: StorageSettings = Field(default_factory=StorageSettings)
    inventory: InventorySettings = Field(default_factory=InventorySettings)
    api: APISettings = Field(default_factory=APISettings)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, loaded on first call."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings so the next call reloads them."""
    global _settings
    _settings = None
