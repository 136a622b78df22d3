"""Configuration management for the coffee log."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def get_data_dir() -> Path:
    """Get the coffee log data directory.

    Priority:
    1. COFFEE_LOG_DIR environment variable
    2. ~/.coffee-log/
    """
    env_dir = os.environ.get("COFFEE_LOG_DIR")
    if env_dir:
        return Path(env_dir)
    return Path.home() / ".coffee-log"


@dataclass
class Config:
    """
    Application configuration.

    Loaded from environment variables with sensible defaults.
    """

    # Remote API
    server_url: str = "http://127.0.0.1:8080"
    api_token: str | None = None
    timeout: float = 30.0

    # Storage settings
    storage_backend: str = "sqlite"  # memory, sqlite
    sqlite_path: str | None = None
    data_dir: Path = field(default_factory=get_data_dir)

    # Connectivity probe
    probe_path: str = "/api/entries"
    probe_interval: float = 15.0

    debug: bool = False

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables."""

        def get_bool(key: str, default: bool) -> bool:
            value = os.getenv(key)
            if value is None:
                return default
            return value.lower() in ("true", "1", "yes")

        def get_float(key: str, default: float) -> float:
            value = os.getenv(key)
            if value is None:
                return default
            try:
                return float(value)
            except ValueError:
                return default

        return cls(
            server_url=os.getenv("COFFEE_LOG_SERVER_URL", "http://127.0.0.1:8080").rstrip("/"),
            api_token=os.getenv("COFFEE_LOG_API_TOKEN") or None,
            timeout=get_float("COFFEE_LOG_TIMEOUT", 30.0),
            storage_backend=os.getenv("COFFEE_LOG_STORAGE", "sqlite"),
            sqlite_path=os.getenv("COFFEE_LOG_SQLITE_PATH"),
            data_dir=get_data_dir(),
            probe_path=os.getenv("COFFEE_LOG_PROBE_PATH", "/api/entries"),
            probe_interval=get_float("COFFEE_LOG_PROBE_INTERVAL", 15.0),
            debug=get_bool("COFFEE_LOG_DEBUG", False),
        )


# Singleton config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
