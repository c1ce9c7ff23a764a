"""Horizontal scrolling and borders for tables."""

from ...core.config import Settings
from ...utils.html import create_element_with_attributes, get_classes, merge_style, parse_html, serialize_html
from ..base import PluginCategory, PluginDescriptor, PostProcessingPlugin

SCROLL_CLASS = "zp-table-scroll"


class Tables(PostProcessingPlugin):
    descriptor = PluginDescriptor(
        name="Tables",
        category=PluginCategory.POST_PROCESSING,
        description="Scrollable, bordered tables",
    )

    def process(self, html: str, settings: Settings) -> str:
        soup = parse_html(html)
        tables = soup.find_all("table")
        if not tables:
            return html
        border = "1px solid #dfe2e5"
        for table in tables:
            parent = table.parent
            if parent is None or SCROLL_CLASS not in get_classes(parent):
                wrapper = create_element_with_attributes(
                    soup, "section", {"class": SCROLL_CLASS, "style": "overflow-x: auto;"}
                )
                table.wrap(wrapper)
            merge_style(table, {"border-collapse": "collapse", "margin": "1em 0"}, override=False)
            for cell in table.find_all(["th", "td"]):
                merge_style(cell, {"border": border, "padding": "6px 12px"}, override=False)
        return serialize_html(soup)
