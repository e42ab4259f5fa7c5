"""Configuration management for the search scraper.

Settings live in ``config/scrapers.yaml``. The file is optional: every accessor
falls back to a built-in default so the scraper runs with no configuration at
all, which is also how the test suite exercises it.
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/scrapers.yaml"
DEFAULT_NAVIGATION_TIMEOUT_SEC = 60.0


class ScraperConfigManager:
    """Centralized access to the YAML configuration.

    Global settings apply to every scraper; platform sections (``scrapers.<name>``)
    hold the platform-specific browser, fingerprint and selector settings.
    """

    def __init__(self, config_path: str | Path = DEFAULT_CONFIG_PATH):
        """Initialize the configuration manager.

        Args:
        ----
            config_path: Path to the YAML file, absolute or relative to the
                project root

        """
        self.config_path = Path(config_path)
        self._config = self._load_config()

    def _resolve_path(self) -> Path:
        if self.config_path.is_absolute():
            return self.config_path
        project_root = Path(__file__).parent.parent.parent.parent
        return project_root / self.config_path

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from YAML, returning an empty mapping if absent."""
        config_file = self._resolve_path()

        if not config_file.exists():
            logger.warning(
                f"⚠️ Configuration file not found: {config_file}, using defaults"
            )
            return {}

        try:
            with open(config_file, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {config_file}"
            )

        logger.debug(f"Loaded configuration from {config_file}")
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScraperConfigManager":
        """Build a manager from an in-memory mapping instead of a file."""
        manager = cls.__new__(cls)
        manager.config_path = Path("<memory>")
        manager._config = data
        return manager

    def get_global_settings(self) -> dict[str, Any]:
        """Get global configuration settings."""
        return self._config.get("global_settings") or {}

    def get_platform_config(self, platform: str) -> dict[str, Any]:
        """Get the configuration section for one platform (empty if absent)."""
        scrapers_config = self._config.get("scrapers") or {}
        return scrapers_config.get(platform) or {}

    def is_debug_mode(self) -> bool:
        return bool(self.get_global_settings().get("debug_mode", False))

    def set_debug_mode(self, enabled: bool) -> None:
        """Override debug mode at runtime (CLI takes precedence over config)."""
        self._config.setdefault("global_settings", {})
        if self._config["global_settings"] is None:
            self._config["global_settings"] = {}
        self._config["global_settings"]["debug_mode"] = enabled

    def is_headless(self) -> bool:
        """Headless unless configured otherwise or debugging."""
        global_settings = self.get_global_settings()
        if self.is_debug_mode():
            return False
        return bool(global_settings.get("headless", True))

    def get_navigation_timeout(self) -> float:
        """Per-navigation timeout in seconds."""
        value = self.get_global_settings().get(
            "navigation_timeout_sec", DEFAULT_NAVIGATION_TIMEOUT_SEC
        )
        try:
            timeout = float(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"navigation_timeout_sec must be a number, got {value!r}"
            ) from e
        if timeout <= 0:
            raise ConfigurationError("navigation_timeout_sec must be positive")
        return timeout


# Global configuration manager instance
_config_manager: ScraperConfigManager | None = None


def get_config_manager(
    config_path: str | Path | None = None,
) -> ScraperConfigManager:
    """Get the global configuration manager instance.

    Args:
    ----
        config_path: Path to configuration file. Passing a path replaces the
            cached instance.

    Returns:
    -------
        ScraperConfigManager instance

    """
    global _config_manager

    if config_path is not None:
        _config_manager = ScraperConfigManager(config_path)
    elif _config_manager is None:
        _config_manager = ScraperConfigManager()

    return _config_manager


def reset_config_manager() -> None:
    """Drop the cached configuration so the next call reloads it."""
    global _config_manager
    _config_manager = None
