"""
Configuration Management for Expense Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage location, retry behaviour and aggregation defaults are
validated once at startup instead of being scattered across modules.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Key-value storage backend configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_LEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    backend: str = Field(
        default="file",
        pattern="^(file|memory)$",
        description="Storage backend: 'file' (JSON files on disk) or 'memory'"
    )
    data_dir: Path = Field(
        default=Path("~/.expense_ledger"),
        description="Directory holding the persisted ledger"
    )
    key: str = Field(
        default="expense-storage",
        min_length=1,
        max_length=100,
        pattern=r"^[A-Za-z0-9._-]+$",
        description="Storage key the whole ledger is written under"
    )
    
    @field_validator('data_dir')
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        """Expand ~ so the path is usable as-is."""
        return v.expanduser()


class PersistenceSettings(BaseSettings):
    """Write-through persistence configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_LEDGER_PERSISTENCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed save is attempted"
    )
    retry_wait_min: float = Field(
        default=0.5,
        ge=0.0,
        description="Minimum back-off between save attempts (seconds)"
    )
    retry_wait_max: float = Field(
        default=5.0,
        ge=0.0,
        description="Maximum back-off between save attempts (seconds)"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.
    
    Loads configuration from environment variables and .env file.
    """
    
    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    # Logging
    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG regardless of log_level"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level for ledger events"
    )
    
    # Aggregation
    monthly_window: int = Field(
        default=6,
        ge=1,
        le=120,
        description="Default number of months returned by monthly totals"
    )
    
    # Validation thresholds
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future an expense date can be before warning"
    )
    max_expense_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Maximum reasonable expense amount (for sanity checking)"
    )
    
    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @property
    def effective_log_level(self) -> str:
        """DEBUG when debug_mode is on, otherwise log_level."""
        return "DEBUG" if self.debug_mode else self.log_level


class Settings(BaseSettings):
    """
    Root settings container.
    
    Aggregates all sub-settings for easy access.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()
    
    @property
    def persistence(self) -> PersistenceSettings:
        return PersistenceSettings()
    
    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    
    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.
    
    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for every section that failed.
    Useful for startup checks.
    """
    results = {}
    
    settings = get_settings()
    
    for name in ("storage", "persistence", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)
    
    return results
