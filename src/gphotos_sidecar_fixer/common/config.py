"""Configuration loader with multi-source support."""

import logging
import os
from pathlib import Path
from typing import Dict, Any, Generic, Optional, Type, TypeVar

import platformdirs
import toml
from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)


class ConfigLoader(Generic[T]):
    """Loads configuration from multiple sources with priority.

    Sources, lowest priority first:

    1. Defaults file (explicit ``defaults_path`` or ``./config/defaults.toml``)
    2. System config (``/etc/<app>/config.toml`` or ``%PROGRAMDATA%``)
    3. User config (``platformdirs.user_config_dir(<app>)/config.toml``)
    4. Environment variables ``<APP>_<SECTION>_<KEY>``
    """

    def __init__(self, app_name: str, config_class: Type[T]) -> None:
        self.app_name = app_name
        self.config_class = config_class
        self._config: Optional[T] = None

    def load(self, defaults_path: Optional[Path] = None) -> T:
        """Load configuration from all sources.

        Args:
            defaults_path: Optional path to a toml file with defaults

        Returns:
            Validated configuration object
        """
        config_dict = self._load_defaults(defaults_path)

        system_config = self._load_system_config()
        if system_config:
            config_dict = self._deep_merge(config_dict, system_config)

        user_config = self._load_user_config()
        if user_config:
            config_dict = self._deep_merge(config_dict, user_config)

        config_dict = self._apply_env_overrides(config_dict)

        self._config = self.config_class(**config_dict)
        return self._config

    def _load_defaults(self, defaults_path: Optional[Path] = None) -> Dict[str, Any]:
        """Load the defaults file if one is available."""
        if defaults_path is not None:
            if not defaults_path.exists():
                raise FileNotFoundError(f"Config file not found: {defaults_path}")
            return toml.load(defaults_path)

        local_defaults = Path.cwd() / "config" / "defaults.toml"
        if local_defaults.exists():
            return toml.load(local_defaults)

        return {}

    def _load_system_config(self) -> Optional[Dict[str, Any]]:
        """Load system-wide configuration."""
        if os.name == "nt":
            system_path = (
                Path(os.environ.get("PROGRAMDATA", "C:\\ProgramData"))
                / self.app_name
                / "config.toml"
            )
        else:
            system_path = Path(f"/etc/{self.app_name}/config.toml")

        if system_path.exists():
            return toml.load(system_path)

        return None

    def _load_user_config(self) -> Optional[Dict[str, Any]]:
        """Load user-specific configuration."""
        user_config_dir = platformdirs.user_config_dir(appname=self.app_name, appauthor=False)
        user_config_path = Path(user_config_dir) / "config.toml"

        logger.debug(f"Looking for user config: {{'path': {str(user_config_path)!r}, 'exists': {user_config_path.exists()}}}")

        if user_config_path.exists():
            return toml.load(user_config_path)

        return None

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Override config with environment variables.

        ``GPHOTOS_SIDECAR_FIXER_FIXER_GENERATE_METADATA=true`` sets
        ``fixer.generate_metadata``. Only the first underscore after the prefix
        separates the section from the key, so keys may contain underscores.
        """
        prefix = f"{self.app_name.upper().replace('-', '_')}_"

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(prefix):
                continue

            parts = env_key[len(prefix):].lower().split("_", 1)
            if len(parts) != 2 or not all(parts):
                logger.warning(f"Ignoring malformed config variable: {{'name': {env_key!r}}}")
                continue

            section, key = parts
            config.setdefault(section, {})[key] = self._convert_env_value(env_value)

        return config

    def _convert_env_value(self, value: str) -> Any:
        """Convert string environment variable to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        # List (comma-separated)
        if "," in value:
            return [v.strip() for v in value.split(",")]

        return value

    @property
    def config(self) -> T:
        """Get loaded configuration."""
        if self._config is None:
            self._config = self.load()
        return self._config
