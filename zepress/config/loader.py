"""Settings file loading for YAML and JSON formats."""

import json
from pathlib import Path
from typing import IO, Any, Callable, Dict, Optional, Type, Union

import structlog
import yaml

from ..core.config import Settings
from ..core.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)


class ConfigLoader:
    """Load settings and initial plugin configuration from YAML/JSON files.

    Expected layout::

        settings:
          default_highlight: monokai
          target: wechat
        plugins:
          CodeBlocks:
            show_line_numbers: true
    """

    @staticmethod
    def load_config(
        config_path: Union[str, Path],
        config_type: Optional[str] = None
    ) -> Dict[str, Any]:
        """Load configuration from file.

        Args:
            config_path: Path to configuration file
            config_type: Optional type override ('yaml', 'json')

        Returns:
            Configuration dictionary

        Raises:
            ConfigurationError: If the file is missing, unreadable or unsupported
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        if config_type:
            file_type = config_type.lower()
        else:
            file_type = config_path.suffix.lower().lstrip('.')

        if file_type in ('yaml', 'yml'):
            return ConfigLoader._read(config_path, yaml.safe_load, yaml.YAMLError, "YAML")
        elif file_type == 'json':
            return ConfigLoader._read(config_path, json.load, json.JSONDecodeError, "JSON")
        else:
            raise ConfigurationError(f"Unsupported config format: {file_type}")

    @staticmethod
    def _read(
        config_path: Path,
        parse: Callable[[IO[str]], Any],
        error_type: Type[Exception],
        label: str
    ) -> Dict[str, Any]:
        """Parse a settings file; an empty document is an empty mapping."""
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = parse(f)
        except error_type as e:
            raise ConfigurationError(f"Invalid {label} in {config_path}", cause=e)
        except OSError as e:
            raise ConfigurationError(f"Cannot read {config_path}", cause=e)
        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ConfigurationError(f"Expected a mapping in {config_path}, got {type(config).__name__}")
        logger.info("Loaded config", format=label, path=str(config_path), sections=list(config))
        return config

    @staticmethod
    def create_settings(
        config_dict: Dict[str, Any],
        base_settings: Optional[Settings] = None
    ) -> Settings:
        """Create Settings from the ``settings`` section of a config dictionary.

        Args:
            config_dict: Configuration dictionary
            base_settings: Settings to extend (defaults to built-in defaults)

        Returns:
            Settings instance
        """
        section = config_dict.get('settings', {}) or {}
        if not isinstance(section, dict):
            raise ConfigurationError("'settings' must be a mapping")
        settings = Settings.from_mapping(section, base=base_settings)
        logger.debug("Created settings", keys=list(section.keys()))
        return settings

    @staticmethod
    def plugin_configs(config_dict: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
        """Return the ``plugins`` section as plugin name to config blob."""
        section = config_dict.get('plugins', {}) or {}
        if not isinstance(section, dict):
            raise ConfigurationError("'plugins' must be a mapping")
        return {name: dict(blob or {}) for name, blob in section.items()}


def load_settings_from_file(config_path: Union[str, Path]) -> Settings:
    """Convenience wrapper: read a file and build Settings from it."""
    return ConfigLoader.create_settings(ConfigLoader.load_config(config_path))
