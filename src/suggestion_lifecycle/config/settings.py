"""Application settings and configuration."""

from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory based on platform."""
    return Path.home() / ".portfolio-suggestions"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Portfolio Suggestion Lifecycle"
    app_version: str = "0.1.0"

    # Suggestions backend
    api_base_url: str = "http://localhost:3000"
    use_stub_backend: bool = False  # in-memory backend for offline use
    request_timeout_seconds: float = 10.0

    # Delays (milliseconds) before re-reading server state
    settle_delay_ms: int = 500
    empty_settle_delay_ms: int = 1000
    monthly_contribution_delay_ms: int = 1000
    batch_monthly_contribution_delay_ms: int = 1500

    # Backend rules mirrored by the stub backend
    recency_window_days: int = 30
    min_cash_available: Decimal = Decimal("0.01")

    # Controller behavior
    max_generations_per_cycle: int = 1
    cleanup_duplicates: bool = True
    cache_enabled: bool = True

    # Data directory (suggestion cache lives here)
    data_dir: Optional[Path] = None

    # Database URL (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None

    log_level: str = "INFO"

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "suggestions.db"
        return f"sqlite:///{db_path}"


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
