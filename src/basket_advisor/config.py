"""Configuration management for Basket Advisor."""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass
class DataConfig:
    """Data storage configuration."""

    storage_dir: Path


@dataclass
class RecommenderConfig:
    """Recommendation engine tuning."""

    limit: int = 10
    min_support: float = 0.01
    history_limit: int = 10000


@dataclass
class DefaultsConfig:
    """Default values configuration."""

    store: str | None = None
    user: str | None = None


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"


@dataclass
class Config:
    """Complete application configuration."""

    data: DataConfig
    recommender: RecommenderConfig
    defaults: DefaultsConfig
    logging: LoggingConfig


class ConfigManager:
    """Manages application configuration from TOML files."""

    def __init__(self, config_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional explicit path to config file.
                        If not provided, searches standard locations.
        """
        self.config_path = config_path or self._find_config()
        self._config = self._load_config()

    @property
    def data(self) -> DataConfig:
        """Get data configuration."""
        return self._config.data

    @property
    def recommender(self) -> RecommenderConfig:
        """Get recommender configuration."""
        return self._config.recommender

    @property
    def defaults(self) -> DefaultsConfig:
        """Get defaults configuration."""
        return self._config.defaults

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration."""
        return self._config.logging

    def _find_config(self) -> Path:
        """Find config file in standard locations."""
        locations = [
            Path.cwd() / "config.toml",
            Path.home() / ".config" / "basket-advisor" / "config.toml",
            Path.home() / ".basket-advisor" / "config.toml",
        ]

        for loc in locations:
            if loc.exists():
                return loc

        # Return default location if none found
        return Path.home() / ".config" / "basket-advisor" / "config.toml"

    def _load_config(self) -> Config:
        """Load configuration from TOML file."""
        if not self.config_path.exists():
            return self._default_config()

        with open(self.config_path, "rb") as f:
            data = tomllib.load(f)

        recommender = data.get("recommender", {})
        defaults = data.get("defaults", {})
        return Config(
            data=DataConfig(
                storage_dir=Path(
                    data.get("data", {}).get("storage_dir", "~/basket-advisor/data")
                ).expanduser(),
            ),
            recommender=RecommenderConfig(
                limit=int(recommender.get("limit", 10)),
                min_support=float(recommender.get("min_support", 0.01)),
                history_limit=int(recommender.get("history_limit", 10000)),
            ),
            defaults=DefaultsConfig(
                store=defaults.get("store"),
                user=defaults.get("user"),
            ),
            logging=LoggingConfig(
                level=str(data.get("logging", {}).get("level", "WARNING")).upper(),
            ),
        )

    def _default_config(self) -> Config:
        """Return default configuration."""
        return Config(
            data=DataConfig(storage_dir=Path.home() / "basket-advisor" / "data"),
            recommender=RecommenderConfig(),
            defaults=DefaultsConfig(),
            logging=LoggingConfig(),
        )

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get config value by dot-notation path.

        Args:
            key_path: Dot-separated path like 'recommender.min_support'
            default: Default value if path not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split(".")
        value: Any = self._config

        for key in keys:
            if hasattr(value, key):
                value = getattr(value, key)
            elif isinstance(value, dict):
                value = value.get(key)
                if value is None:
                    return default
            else:
                return default

        return value if value is not None else default
