"""Configuration management for collab-client using YAML files."""

from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger()

CONFIG_DIR_NAME = ".collab-client"


def _check_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid {key}: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid {key}: {value!r}") from e


def _check_positive(key: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid {key}: {value!r}") from e
    if number <= 0:
        raise ValueError(f"Invalid {key}: {value!r} must be positive")
    return number


class Config:
    """Configuration manager using YAML file storage.

    Local config lives in .collab-client/config.yaml in the current directory and
    falls back to the global ~/.collab-client/config.yaml when a key is missing.

    Known keys: api.base_url, api.token, api.user_id, api.timeout.
    """

    def __init__(self, use_global: bool = False, config_dir: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            use_global: If True, use global config only. If False, use local config with global fallback.
            config_dir: Custom directory to store config file (overrides use_global)
        """
        if config_dir is not None:
            self.config_dir = Path(config_dir)
            self.is_global = use_global
        elif use_global:
            self.config_dir = Path.home() / CONFIG_DIR_NAME
            self.is_global = True
        else:
            self.config_dir = Path.cwd() / CONFIG_DIR_NAME
            self.is_global = False

        self.config_file = self.config_dir / "config.yaml"
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self._config: dict[str, Any] = self._load()

        self._global_config: dict[str, Any] = {}
        if not self.is_global:
            global_config_file = Path.home() / CONFIG_DIR_NAME / "config.yaml"
            if global_config_file.exists() and global_config_file != self.config_file:
                try:
                    with open(global_config_file, "r") as f:
                        self._global_config = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    logger.warning("Failed to load global config", error=str(e))

        logger.debug("Config initialized", config_file=str(self.config_file), is_global=self.is_global)

    def _load(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_file.exists():
            logger.debug("Config file does not exist, initializing empty config")
            return {}

        try:
            with open(self.config_file, "r") as f:
                config = yaml.safe_load(f) or {}
                logger.debug("Config loaded successfully", keys=list(config.keys()))
                return config
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load config", error=str(e))
            raise ValueError(f"Failed to load config from {self.config_file}: {e}") from e

    def _save(self) -> None:
        """Save configuration to YAML file."""
        try:
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)
            logger.debug("Config saved successfully")
        except OSError as e:
            logger.error("Failed to save config", error=str(e))
            raise ValueError(f"Failed to save config to {self.config_file}: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value, checking local config before global."""
        if key in self._config:
            logger.debug("Getting config value from local", key=key)
            return self._config[key]

        if not self.is_global and key in self._global_config:
            logger.debug("Getting config value from global", key=key)
            return self._global_config[key]

        logger.debug("Config value not found", key=key)
        return default

    def get_int(self, key: str) -> int | None:
        """Get an integer setting such as api.user_id.

        Raises:
            ValueError: If the stored value is not an integer
        """
        value = self.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return _check_int(key, value)

    def get_float(self, key: str, default: float) -> float:
        """Get a positive number setting such as api.timeout.

        Raises:
            ValueError: If the stored value is not a positive number
        """
        value = self.get(key)
        if value is None:
            return default
        return _check_positive(key, value)

    def set(self, key: str, value: str) -> None:
        """Persist a setting; typed keys (api.user_id, api.timeout) are validated first.

        Raises:
            ValueError: If a typed key receives a malformed value
        """
        logger.debug("Setting config value", key=key)
        check = {"api.user_id": _check_int, "api.timeout": _check_positive}.get(key)
        if check is not None:
            check(key, value)
        self._config[key] = value
        self._save()

    def unset(self, key: str) -> None:
        logger.debug("Unsetting config value", key=key)
        if key in self._config:
            del self._config[key]
            self._save()

    def list(self) -> dict[str, Any]:
        """List all settings; local values take precedence over global ones."""
        if self.is_global:
            logger.debug("Listing global config values", count=len(self._config))
            return self._config.copy()
        merged = self._global_config.copy()
        merged.update(self._config)
        logger.debug("Listing merged config values", count=len(merged))
        return merged


def get_config(use_global: bool = False) -> Config:
    """Get a configuration instance."""
    return Config(use_global=use_global)
