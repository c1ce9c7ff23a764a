"""Final adjustments for the WeChat official-account editor.

The editor strips ``<style>``, ``<script>`` and ``<link>`` elements and
custom properties, so stylesheet rules are copied onto elements first and
card previews are swapped back to the markup the editor expects.
"""

from bs4 import BeautifulSoup

from ...core.config import Settings
from ...core.exceptions import CssResolutionError
from ...css.inline import BASE_INLINE_CSS, inline_stylesheet
from ...utils.html import parse_html, serialize_html
from ..base import PluginCategory, PluginDescriptor, PostProcessingPlugin

CARD_SOURCE_ATTR = "data-card-source"
STRIPPED_TAGS = ("style", "script", "link")


class WechatAdapter(PostProcessingPlugin):
    """Target adapter; must stay the last post-processing plugin."""

    descriptor = PluginDescriptor(
        name="WechatAdapter",
        category=PluginCategory.POST_PROCESSING,
        description="Inline styles and restore cards for the WeChat editor",
    )
    is_target_adapter = True

    def process(self, html: str, settings: Settings) -> str:
        if not settings.requires_css_variable_resolution:
            return html

        soup = parse_html(html)
        restored = self.restore_cards(soup)

        inlined = 0
        for index, style in enumerate(soup.find_all("style")):
            css = "".join(str(child) for child in style.contents)
            try:
                inlined += inline_stylesheet(soup, css)
            except CssResolutionError as e:
                self.logger.warning("Skipping style block that cannot be inlined", index=index, error=str(e))
        inlined += inline_stylesheet(soup, BASE_INLINE_CSS)

        removed = 0
        for element in soup.find_all(STRIPPED_TAGS):
            element.decompose()
            removed += 1
        for element in soup.find_all(True):
            for attr in [name for name in element.attrs if name.lower().startswith("on")]:
                del element[attr]

        self.logger.debug("Adapted document", cards=restored, inlined=inlined, removed=removed)
        return serialize_html(soup)

    def restore_cards(self, soup: BeautifulSoup) -> int:
        """Replace card previews with the editor's own card markup."""
        count = 0
        for preview in soup.find_all(attrs={CARD_SOURCE_ATTR: True}):
            source = parse_html(preview[CARD_SOURCE_ATTR])
            preview.replace_with(source)
            count += 1
        return count
