"""Base plugin interface and types for the content pipeline."""

import abc
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Mapping, Optional

from ..config.schema import ENABLED_FIELD, ConfigField
from ..config.store import ConfigStore, InMemoryConfigStore, PluginConfigManager
from ..core.config import Settings
from ..utils.logging import get_plugin_logger

if TYPE_CHECKING:
    from markdown_it import MarkdownIt

    from ..core.context import RenderContext


class PluginCategory(Enum):
    """Where a plugin hooks into the conversion."""
    STRUCTURAL = "structural"
    POST_PROCESSING = "post_processing"


@dataclass(frozen=True)
class PluginDescriptor:
    """Static identity of a plugin class."""
    name: str
    category: PluginCategory
    description: str = ""
    version: str = "1.0.0"


class BasePlugin(abc.ABC):
    """Base class for all plugins.

    Subclasses declare a ``descriptor``, their ``default_config`` and the
    ``config_fields`` a settings UI should offer. Instances are created once
    per pipeline and keep their configuration in a
    :class:`~zepress.config.store.PluginConfigManager`.
    """

    descriptor: ClassVar[PluginDescriptor]
    default_config: ClassVar[Dict[str, Any]] = {}
    config_fields: ClassVar[Dict[str, ConfigField]] = {}

    def __init__(self, store: Optional[ConfigStore] = None):
        """Initialize the plugin.

        Args:
            store: Configuration store (defaults to an in-memory store)
        """
        self.logger = get_plugin_logger(self.get_name())
        self._config = PluginConfigManager(
            self.get_name(),
            self.default_config,
            self.get_config_fields(),
            store if store is not None else InMemoryConfigStore(),
            migrate=self.migrate_config,
        )

    @classmethod
    def get_name(cls) -> str:
        return cls.descriptor.name

    @classmethod
    def get_category(cls) -> PluginCategory:
        return cls.descriptor.category

    @property
    def plugin_info(self) -> Dict[str, Any]:
        """Return plugin metadata.

        Returns:
            Dictionary containing name, version, description, category and
            enabled state
        """
        return {
            "name": self.descriptor.name,
            "version": self.descriptor.version,
            "description": self.descriptor.description,
            "category": self.descriptor.category.value,
            "enabled": self.is_enabled(),
        }

    def get_config_fields(self) -> Dict[str, ConfigField]:
        """Fields offered to the settings UI; override for dynamic options."""
        return dict(self.config_fields)

    def get_config_schema(self) -> Dict[str, Dict[str, Any]]:
        """Describe the plugin's configuration for a settings UI.

        Pure: needs no document and has no side effects.
        """
        fields = {"enabled": ENABLED_FIELD, **self.get_config_fields()}
        return {key: field.to_dict() for key, field in fields.items()}

    def get_config(self) -> Dict[str, Any]:
        return self._config.get_config()

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a single configuration value.

        Args:
            key: Config key
            default: Default value if key doesn't exist

        Returns:
            Config value or default
        """
        return self._config.get(key, default)

    def update_config(self, partial: Mapping[str, Any]) -> Dict[str, Any]:
        """Merge a partial config; unspecified keys retain their value.

        Args:
            partial: Keys to change

        Returns:
            The new configuration
        """
        before, after = self._config.update_config(partial)
        if before != after:
            self.on_config_changed(before, after)
        return after

    def on_config_changed(self, before: Dict[str, Any], after: Dict[str, Any]) -> None:
        """Hook called with config snapshots taken before and after a change."""
        pass

    def migrate_config(self, blob: Dict[str, Any]) -> Dict[str, Any]:
        """Upgrade a stored config blob written by an older version."""
        return blob

    def is_enabled(self) -> bool:
        return self._config.is_enabled()

    def set_enabled(self, enabled: bool) -> None:
        self.update_config({"enabled": enabled})


class PostProcessingPlugin(BasePlugin):
    """Plugin that rewrites already-rendered HTML."""

    # The target adapter must run after every other post-processing plugin
    is_target_adapter: ClassVar[bool] = False

    @abc.abstractmethod
    def process(self, html: str, settings: Settings) -> str:
        """Transform the document.

        Args:
            html: Current document
            settings: Settings for this transformation

        Returns:
            Next document
        """
        pass

    def get_theme_color(self, settings: Settings) -> str:
        """Accent colour: the user override, else the theme's primary colour."""
        if settings.enable_theme_color:
            return settings.theme_color
        return f"var(--primary-color, {settings.theme_color})"


class StructuralPlugin(BasePlugin):
    """Plugin that hooks the Markdown tokenizer or renderer."""

    @abc.abstractmethod
    def install(self, md: "MarkdownIt", context: "RenderContext") -> None:
        """Register rules on a parser created for a single render."""
        pass
