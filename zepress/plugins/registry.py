"""Plugin registry holding the pipeline's plugin instances."""

from typing import Any, Dict, List, Optional

import structlog

from ..assets.catalogue import AssetCatalogue, PygmentsAssetCatalogue
from ..config.store import ConfigStore, InMemoryConfigStore
from ..core.exceptions import ConfigurationError
from ..highlight.highlighter import Highlighter
from ..highlight.themes import ThemeResolver
from .base import BasePlugin, PluginCategory, PostProcessingPlugin, StructuralPlugin
from .html import Blockquotes, CodeBlocks, Headings, Images, Lists, Tables, WechatAdapter
from .markdown import (
    Callouts,
    CodeHighlight,
    CodeRenderer,
    Embeds,
    Footnotes,
    Links,
    Math,
    TextHighlight,
)

logger = structlog.get_logger(__name__)


class PluginRegistry:
    """Registry for plugin instances and the dependencies they share.

    Both plugin lists keep registration order, which is execution order.
    The target adapter is always the last post-processing plugin.
    """

    def __init__(
        self,
        catalogue: Optional[AssetCatalogue] = None,
        store: Optional[ConfigStore] = None,
        highlighter: Optional[Highlighter] = None,
        themes: Optional[ThemeResolver] = None,
    ):
        """Initialize the plugin registry.

        Args:
            catalogue: Theme and asset catalogue
            store: Configuration store shared by every plugin
            highlighter: Shared syntax highlighter
            themes: Theme resolver; built on the catalogue if omitted
        """
        self.catalogue = catalogue or PygmentsAssetCatalogue()
        self.store = store if store is not None else InMemoryConfigStore()
        self.highlighter = highlighter or Highlighter()
        self.themes = themes or ThemeResolver(self.catalogue)
        self._post_processing: List[PostProcessingPlugin] = []
        self._structural: List[StructuralPlugin] = []

    def build_post_processing_plugins(self) -> List[PostProcessingPlugin]:
        """Register the built-in post-processing plugins in execution order."""
        for plugin in (
            Images(self.store),
            Blockquotes(self.store),
            CodeBlocks(self.store, themes=self.themes, highlighter=self.highlighter, catalogue=self.catalogue),
            Headings(self.store),
            Lists(self.store),
            Tables(self.store),
            WechatAdapter(self.store),
        ):
            self.register_plugin(plugin)
        return list(self._post_processing)

    def build_structural_plugins(self) -> List[StructuralPlugin]:
        """Register the built-in Markdown extensions in installation order."""
        for plugin in (
            Callouts(self.store),
            Embeds(self.store),
            CodeHighlight(self.store),
            Links(self.store),
            Footnotes(self.store),
            TextHighlight(self.store),
            CodeRenderer(self.store),
            Math(self.store),
        ):
            self.register_plugin(plugin)
        return list(self._structural)

    def register_plugin(self, plugin: BasePlugin) -> bool:
        """Register a plugin instance.

        Args:
            plugin: Plugin to register

        Returns:
            False if a plugin with the same name is already registered

        Raises:
            ConfigurationError: If a second target adapter is registered
        """
        name = plugin.get_name()
        if self.get_plugin(name) is not None:
            logger.debug("Plugin already registered, skipping", name=name)
            return False

        match plugin.get_category():
            case PluginCategory.STRUCTURAL:
                self._structural.append(plugin)
            case PluginCategory.POST_PROCESSING:
                self._insert_post_processing(plugin)

        logger.debug("Registered plugin", name=name, category=plugin.get_category().value)
        return True

    def _insert_post_processing(self, plugin: PostProcessingPlugin) -> None:
        adapter = next((p for p in self._post_processing if p.is_target_adapter), None)
        if plugin.is_target_adapter:
            if adapter is not None:
                raise ConfigurationError(
                    f"Target adapter already registered: {adapter.get_name()}", plugin=plugin.get_name()
                )
            self._post_processing.append(plugin)
        elif adapter is not None:
            self._post_processing.insert(self._post_processing.index(adapter), plugin)
        else:
            self._post_processing.append(plugin)

    @property
    def post_processing_plugins(self) -> List[PostProcessingPlugin]:
        return list(self._post_processing)

    @property
    def structural_plugins(self) -> List[StructuralPlugin]:
        return list(self._structural)

    def get_plugin(self, name: str) -> Optional[BasePlugin]:
        """Get a plugin by name.

        Args:
            name: Name of the plugin

        Returns:
            Plugin or None if not found
        """
        for plugin in [*self._structural, *self._post_processing]:
            if plugin.get_name() == name:
                return plugin
        return None

    def list_plugins(
        self,
        category: Optional[PluginCategory] = None,
        enabled_only: bool = False
    ) -> List[str]:
        """List registered plugins.

        Args:
            category: Filter by category
            enabled_only: Only return enabled plugins

        Returns:
            Plugin names in execution order
        """
        names = []
        for plugin in [*self._structural, *self._post_processing]:
            if category and plugin.get_category() != category:
                continue
            if enabled_only and not plugin.is_enabled():
                continue
            names.append(plugin.get_name())
        return names

    def get_config_schema(self, name: str) -> Dict[str, Dict[str, Any]]:
        """Configuration schema of a plugin, or an empty dict if it is unknown."""
        plugin = self.get_plugin(name)
        return plugin.get_config_schema() if plugin else {}

    def get_plugin_info(self) -> Dict[str, Any]:
        """Get information about registered plugins.

        Returns:
            Dictionary with plugin information
        """
        plugins = [*self._structural, *self._post_processing]
        return {
            "total_plugins": len(plugins),
            "enabled_plugins": sum(1 for p in plugins if p.is_enabled()),
            "plugins": {p.get_name(): p.plugin_info for p in plugins},
        }
