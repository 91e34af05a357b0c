"""
Configuration management for WebP Watchman.

Uses pydantic-settings to load configuration from environment variables
and .env files.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Watched directories
    watch_roots: str = "~/Downloads,~/Pictures"
    recursive: bool = False

    # Debounce Configuration
    settle_window: float = 0.25  # seconds
    max_wait: Optional[float] = None  # seconds, disabled when unset

    # Observer Configuration
    use_polling: bool = False
    poll_interval: float = 1.0  # seconds

    # Notification Configuration
    notifications_enabled: bool = True
    notification_icon: Optional[Path] = None

    # Logging Configuration
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def get_watch_roots(self) -> list[Path]:
        """
        Parse watch roots into list of Paths.

        Raises:
            RuntimeError: If a root uses ``~`` and the home directory
                cannot be resolved.
        """
        return [
            Path(p.strip()).expanduser()
            for p in self.watch_roots.split(',')
            if p.strip()
        ]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
