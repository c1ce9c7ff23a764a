"""Blockquote accent styling."""

from ...core.config import Settings
from ...utils.html import merge_style, parse_html, serialize_html
from ..base import PluginCategory, PluginDescriptor, PostProcessingPlugin


class Blockquotes(PostProcessingPlugin):
    """Draw blockquotes with a left border in the theme colour."""

    descriptor = PluginDescriptor(
        name="Blockquotes",
        category=PluginCategory.POST_PROCESSING,
        description="Theme-coloured blockquote borders",
    )

    def process(self, html: str, settings: Settings) -> str:
        soup = parse_html(html)
        quotes = soup.find_all("blockquote")
        if not quotes:
            return html
        color = self.get_theme_color(settings)
        for quote in quotes:
            merge_style(quote, {
                "margin": "1em 0",
                "padding": "0.5em 1em",
                "color": "#666",
                "background": "rgba(0, 0, 0, 0.03)",
            }, override=False)
            merge_style(quote, {"border-left": f"4px solid {color}"})
        return serialize_html(soup)
