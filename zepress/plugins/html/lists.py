"""Explicit list markers; the target ignores user-agent defaults for nesting."""

from bs4 import Tag

from ...core.config import Settings
from ...utils.html import get_classes, merge_style, parse_html, serialize_html
from ..base import PluginCategory, PluginDescriptor, PostProcessingPlugin

UNORDERED_MARKERS = ("disc", "circle", "square")
ORDERED_MARKERS = ("decimal", "lower-alpha", "lower-roman")


def list_depth(element: Tag) -> int:
    return sum(1 for parent in element.parents if parent.name in ("ul", "ol"))


class Lists(PostProcessingPlugin):
    descriptor = PluginDescriptor(
        name="Lists",
        category=PluginCategory.POST_PROCESSING,
        description="Nesting-aware list markers",
    )

    def process(self, html: str, settings: Settings) -> str:
        soup = parse_html(html)
        lists = soup.find_all(["ul", "ol"])
        if not lists:
            return html
        for element in lists:
            # Task lists carry their own checkboxes
            if "contains-task-list" in get_classes(element):
                continue
            markers = ORDERED_MARKERS if element.name == "ol" else UNORDERED_MARKERS
            marker = markers[list_depth(element) % len(markers)]
            merge_style(element, {"list-style-type": marker, "padding-left": "2em"}, override=False)
        return serialize_html(soup)
