"""Markdown to HTML rendering with the structural plugins installed."""

from typing import TYPE_CHECKING, Iterable, Optional, Sequence

import structlog
from markdown_it import MarkdownIt

from ..constants import ADMONITION_FENCE_PREFIX, CARD_FENCE, MATH_FENCE_LANGUAGES, MERMAID_FENCE
from .config import Settings
from .context import RenderContext, RenderQueue, RenderResult
from .exceptions import RenderError

if TYPE_CHECKING:
    from ..assets.catalogue import AssetCatalogue
    from ..highlight.highlighter import Highlighter
    from ..highlight.themes import ThemeResolver
    from ..plugins.base import StructuralPlugin

logger = structlog.get_logger(__name__)

_SPECIAL_FENCES = frozenset(MATH_FENCE_LANGUAGES) | {MERMAID_FENCE, CARD_FENCE}


def create_parser() -> MarkdownIt:
    """A fresh parser; rules installed by plugins never leak between renders."""
    return MarkdownIt("commonmark").enable(["table", "strikethrough"])


def fence_languages(md: MarkdownIt, text: str) -> set[str]:
    """Languages of the fenced code blocks that will be highlighted."""
    languages = set()
    for token in md.parse(text):
        if token.type != "fence" or not token.info.strip():
            continue
        language = token.info.strip().split(maxsplit=1)[0].lower()
        if language in _SPECIAL_FENCES or language.startswith(ADMONITION_FENCE_PREFIX):
            continue
        languages.add(language)
    return languages


class MarkdownRenderer:
    """Render Markdown with the enabled structural plugins."""

    def __init__(
        self,
        structural_plugins: Sequence["StructuralPlugin"],
        catalogue: "AssetCatalogue",
        highlighter: "Highlighter",
        themes: Optional["ThemeResolver"] = None,
    ):
        """Initialize the renderer.

        Args:
            structural_plugins: Plugins in installation order
            catalogue: Theme and asset catalogue
            highlighter: Highlighter used for fenced code
            themes: Theme resolver; built on the catalogue if omitted
        """
        if themes is None:
            from ..highlight.themes import ThemeResolver

            themes = ThemeResolver(catalogue)
        self.structural_plugins = list(structural_plugins)
        self.catalogue = catalogue
        self.highlighter = highlighter
        self.themes = themes

    def build(self, settings: Settings) -> tuple[MarkdownIt, RenderContext]:
        """Create a parser with every enabled plugin installed for one render.

        A plugin that fails to install is skipped with an error log.
        """
        md = create_parser()
        context = RenderContext(
            settings=settings,
            catalogue=self.catalogue,
            highlighter=self.highlighter,
            themes=self.themes,
            queue=RenderQueue(),
        )
        for plugin in self.structural_plugins:
            if not plugin.is_enabled():
                continue
            try:
                plugin.install(md, context)
            except Exception as e:
                logger.error("Plugin install failed", name=plugin.get_name(), error=str(e))
        return md, context

    def render(self, text: str, settings: Settings) -> RenderResult:
        """Render Markdown to HTML.

        Args:
            text: Markdown source
            settings: Settings for this render

        Returns:
            Rendered HTML and the jobs still pending for its placeholders

        Raises:
            RenderError: If the parser itself fails
        """
        md, context = self.build(settings)
        try:
            html = md.render(text)
        except Exception as e:
            raise RenderError("Markdown rendering failed", cause=e)
        logger.debug("Rendered markdown", size=len(html), pending=len(context.queue))
        return RenderResult(html=html, pending=context.queue.jobs)

    async def render_async(self, text: str, settings: Settings) -> RenderResult:
        """Preload every fence language and the active theme, then render."""
        await self.preload(fence_languages(create_parser(), text), settings)
        return self.render(text, settings)

    async def preload(self, languages: Iterable[str], settings: Settings) -> None:
        theme = self.themes.resolve(settings.default_highlight)
        await self.highlighter.cache.preload(languages=languages, styles=[theme.style or theme.name])
