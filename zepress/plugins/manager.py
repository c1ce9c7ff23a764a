"""Plugin manager running post-processing plugins over a document."""

import time
from collections import defaultdict
from typing import Any, Callable, Optional, Sequence

import structlog
from bs4.element import Stylesheet

from ..assets.catalogue import AssetCatalogue
from ..constants import THEME_ALIASES
from ..core.config import Settings
from ..core.exceptions import PluginExecutionError
from ..css.variables import CssVariableResolver, document_definitions, resolve_inline_styles, resolve_style_blocks
from ..utils.html import parse_html, serialize_html
from .base import PostProcessingPlugin

logger = structlog.get_logger(__name__)

HIGHLIGHT_STYLE_ATTR = "data-highlight-style"


class PluginExecutionContext:
    """Statistics for a single run of the pipeline."""

    def __init__(self):
        self.execution_stats: dict[str, dict[str, Any]] = {}
        self.start_time = time.perf_counter()
        self.end_time: Optional[float] = None

    def record_plugin_stats(self, plugin_name: str, stats: dict[str, Any]) -> None:
        """Record plugin execution statistics.

        Args:
            plugin_name: Name of the plugin
            stats: Execution statistics
        """
        self.execution_stats[plugin_name] = stats

    def finish(self) -> None:
        self.end_time = time.perf_counter()

    @property
    def total_duration(self) -> float:
        return (self.end_time or time.perf_counter()) - self.start_time


class PluginManager:
    """Runs the post-processing plugins as a left fold over the document.

    A plugin that raises is skipped: its input is passed on unchanged, the
    failure is logged and the ``plugin_error`` hooks are called. When the
    target cannot evaluate CSS custom properties, ``var()`` references are
    resolved in ``<style>`` blocks before the fold and in inline styles
    after it.
    """

    def __init__(self, plugins: Sequence[PostProcessingPlugin], catalogue: Optional[AssetCatalogue] = None):
        """Initialize plugin manager.

        Args:
            plugins: Plugins in execution order
            catalogue: Source of the highlight stylesheet injected for the
                target
        """
        self._plugins = list(plugins)
        self.catalogue = catalogue
        self.resolver = CssVariableResolver()
        self._hooks: dict[str, list[Callable]] = defaultdict(list)
        self.last_execution_stats: dict[str, dict[str, Any]] = {}

    def process(self, html: str, settings: Settings) -> str:
        """Run every enabled plugin over the document.

        Args:
            html: Rendered document
            settings: Settings for this transformation

        Returns:
            Transformed document
        """
        context = PluginExecutionContext()
        resolve_variables = settings.requires_css_variable_resolution

        result = html
        definitions: dict[str, str] = {}
        if resolve_variables:
            result = self.inject_highlight_css(result, settings)
            result = resolve_style_blocks(result, self.resolver)
            # The target adapter removes <style> elements before the inline pass
            definitions = document_definitions(result, self.resolver)

        for plugin in self._plugins:
            if not plugin.is_enabled():
                continue
            result = self._execute(plugin, result, settings, context)

        if resolve_variables:
            result = resolve_inline_styles(result, self.resolver, defaults=definitions)

        context.finish()
        self.last_execution_stats = dict(context.execution_stats)
        logger.debug(
            "Processed document",
            plugins=len(context.execution_stats),
            duration_ms=round(context.total_duration * 1000, 2),
        )
        return result

    def _execute(
        self, plugin: PostProcessingPlugin, html: str, settings: Settings, context: PluginExecutionContext
    ) -> str:
        name = plugin.get_name()
        start_time = time.perf_counter()
        try:
            result = plugin.process(html, settings)
            if not isinstance(result, str):
                raise TypeError(f"process() returned {type(result).__name__}, expected str")
        except Exception as e:
            error = PluginExecutionError("Plugin execution failed", plugin=name, cause=e)
            logger.error("Plugin execution failed", name=name, error=str(e))
            context.record_plugin_stats(name, {"duration": 0, "success": False, "error": str(e)})
            self._call_hooks("plugin_error", name, error)
            return html

        duration = time.perf_counter() - start_time
        context.record_plugin_stats(name, {"duration": duration, "success": True})
        logger.debug("Plugin executed successfully", name=name, duration_ms=round(duration * 1000, 2))
        self._call_hooks("post_plugin_execute", name, result)
        return result

    def inject_highlight_css(self, html: str, settings: Settings) -> str:
        """Add the active highlight style's stylesheet once per document."""
        if self.catalogue is None:
            return html
        soup = parse_html(html)
        if soup.find("style", attrs={HIGHLIGHT_STYLE_ATTR: True}) is not None:
            return html

        name = THEME_ALIASES.get(settings.default_highlight.lower(), settings.default_highlight)
        style = self.catalogue.lookup_highlight_style(name)
        if style is None:
            logger.debug("No stylesheet for highlight style", style=name)
            return html

        element = soup.new_tag("style", attrs={HIGHLIGHT_STYLE_ATTR: style.name})
        element.append(Stylesheet(style.css))
        target = soup.body or soup
        target.insert(0, element)
        return serialize_html(soup)

    def add_hook(self, event: str, callback: Callable) -> None:
        """Add a hook callback for plugin events.

        Args:
            event: ``plugin_error`` (called with name and error) or
                ``post_plugin_execute`` (called with name and result)
            callback: Callback function to call
        """
        self._hooks[event].append(callback)
        logger.debug("Added plugin hook", hook=event, callback=getattr(callback, "__name__", repr(callback)))

    def _call_hooks(self, event: str, *args: Any) -> None:
        for callback in self._hooks.get(event, []):
            try:
                callback(*args)
            except Exception as e:
                logger.warning(
                    "Hook callback failed",
                    hook=event,
                    callback=getattr(callback, "__name__", repr(callback)),
                    error=str(e),
                )

    def get_plugins(self) -> list[PostProcessingPlugin]:
        return list(self._plugins)

    def get_plugin(self, name: str) -> Optional[PostProcessingPlugin]:
        return next((p for p in self._plugins if p.get_name() == name), None)
