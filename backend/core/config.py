"""
Configuration management for the order coordination backend.

Values are read from the environment (or a local .env file) so terminals,
workers and tests can point at different stores without code changes.
"""

from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings with environment variable support.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database Configuration
    database_url: str = "sqlite:///./orderflow.db"
    db_pool_size: int = 10
    db_max_overflow: int = 20

    # Environment Settings
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    log_sql_queries: bool = False
    slow_query_threshold_seconds: float = 1.0

    # API
    cors_origins: List[str] = ["http://localhost:3000"]

    # Money
    currency_code: str = "OMR"
    money_decimal_places: int = 3  # OMR has three minor digits

    # Order store concurrency
    order_conflict_max_retries: int = 3
    order_conflict_initial_delay_seconds: float = 0.05
    order_conflict_max_delay_seconds: float = 1.0
    order_conflict_backoff_factor: float = 2.0

    # Catalog cache (menu, taxes, profile)
    catalog_cache_ttl_seconds: int = 60
    catalog_cache_max_size: int = 256

    # Kitchen display timer thresholds (fraction of target prep time)
    kds_warning_ratio: float = 0.5
    kds_critical_ratio: float = 0.8

    # Newest orders returned by listings that include settled orders
    order_history_limit: int = 500

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("kds_critical_ratio")
    @classmethod
    def validate_kds_ratios(cls, v, info):
        warning = info.data.get("kds_warning_ratio")
        if warning is not None and v < warning:
            raise ValueError("kds_critical_ratio must be >= kds_warning_ratio")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Returns:
        Settings instance with environment variables loaded
    """
    return Settings()


def reset_settings() -> None:
    """Drop the cached settings (mainly for testing)"""
    get_settings.cache_clear()


def validate_production_config(settings: Optional[Settings] = None):
    """Validate configuration for production deployment."""
    settings = settings or get_settings()
    if not settings.is_production:
        return

    issues = []
    if settings.debug:
        issues.append("DEBUG is enabled in production")
    if settings.is_sqlite:
        issues.append("SQLite is not supported for multi-terminal production use")
    if "localhost" in settings.database_url:
        issues.append("Database URL appears to use localhost")

    if issues:
        raise ValueError(f"Production configuration issues detected: {', '.join(issues)}")
