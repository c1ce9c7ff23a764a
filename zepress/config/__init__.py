"""Settings loading and per-plugin configuration."""

from .loader import ConfigLoader, load_settings_from_file
from .schema import ConfigField, ConfigOption, FieldKind
from .store import ConfigStore, InMemoryConfigStore, PluginConfigManager

__all__ = [
    "ConfigField",
    "ConfigLoader",
    "ConfigOption",
    "ConfigStore",
    "FieldKind",
    "InMemoryConfigStore",
    "PluginConfigManager",
    "load_settings_from_file",
]
