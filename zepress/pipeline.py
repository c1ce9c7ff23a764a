"""The content pipeline: Markdown rendering followed by HTML post-processing."""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import structlog

from .assets.catalogue import AssetCatalogue
from .config.loader import ConfigLoader
from .config.store import ConfigStore, InMemoryConfigStore
from .core.config import Settings
from .core.context import RenderResult
from .core.renderer import MarkdownRenderer
from .highlight.highlighter import Highlighter
from .highlight.themes import ThemeResolver
from .plugins.manager import PluginManager
from .plugins.registry import PluginRegistry

logger = structlog.get_logger(__name__)


class Pipeline:
    """Converts Markdown to HTML ready for the configured target.

    One instance owns the plugin registry, the post-processing manager and
    the Markdown renderer. Plugin instances and their configuration live as
    long as the pipeline; each call receives its own :class:`Settings`.
    """

    def __init__(self, registry: PluginRegistry):
        """Initialize the pipeline.

        Args:
            registry: Registry already holding the plugins to run
        """
        self.registry = registry
        self.manager = PluginManager(registry.post_processing_plugins, catalogue=registry.catalogue)
        self.renderer = MarkdownRenderer(
            registry.structural_plugins,
            registry.catalogue,
            registry.highlighter,
            themes=registry.themes,
        )
        logger.info(
            "Initialized pipeline",
            structural=len(registry.structural_plugins),
            post_processing=len(registry.post_processing_plugins),
        )

    @property
    def themes(self) -> ThemeResolver:
        return self.registry.themes

    def process(self, html: str, settings: Optional[Settings] = None) -> str:
        """Run the post-processing plugins over rendered HTML."""
        return self.manager.process(html, settings or Settings())

    def render(self, markdown: str, settings: Optional[Settings] = None) -> RenderResult:
        """Render Markdown; out-of-band renders stay pending in the result."""
        return self.renderer.render(markdown, settings or Settings())

    async def render_async(self, markdown: str, settings: Optional[Settings] = None) -> RenderResult:
        return await self.renderer.render_async(markdown, settings or Settings())

    def convert(self, markdown: str, settings: Optional[Settings] = None) -> RenderResult:
        """Render Markdown and post-process the result.

        Args:
            markdown: Markdown source
            settings: Settings for this conversion

        Returns:
            RenderResult with the final HTML and any pending renders
        """
        settings = settings or Settings()
        rendered = self.renderer.render(markdown, settings)
        return RenderResult(html=self.manager.process(rendered.html, settings), pending=rendered.pending)

    def get_config_schema(self, plugin_name: str) -> Dict[str, Dict[str, Any]]:
        return self.registry.get_config_schema(plugin_name)


def create_pipeline(
    catalogue: Optional[AssetCatalogue] = None,
    store: Optional[ConfigStore] = None,
    highlighter: Optional[Highlighter] = None,
    config_path: Optional[Union[str, Path]] = None,
) -> Pipeline:
    """Build a pipeline with every built-in plugin registered.

    Args:
        catalogue: Theme and asset catalogue
        store: Plugin configuration store
        highlighter: Shared highlighter
        config_path: YAML/JSON file whose ``plugins`` section seeds an
            in-memory store when no store is given

    Returns:
        Pipeline instance
    """
    if store is None and config_path is not None:
        store = InMemoryConfigStore(ConfigLoader.plugin_configs(ConfigLoader.load_config(config_path)))

    registry = PluginRegistry(catalogue=catalogue, store=store, highlighter=highlighter)
    registry.build_structural_plugins()
    registry.build_post_processing_plugins()
    return Pipeline(registry)
