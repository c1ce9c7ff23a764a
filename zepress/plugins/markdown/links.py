"""External links rewritten as numbered references.

The target does not allow outbound links, so link text is kept, followed by
a ``[n]`` marker, and the URLs are listed at the end of the document.
"""

import html
from urllib.parse import urlparse

from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore
from markdown_it.token import Token

from ...constants import WECHAT_LINK_HOST
from ...core.context import RenderContext
from ..base import PluginCategory, PluginDescriptor, StructuralPlugin

REFERENCES_CLASS = "zp-link-references"


def should_footnote(href: str, mode: str) -> bool:
    """Whether a link is rewritten under a footnote mode (none/all/non-wx)."""
    parsed = urlparse(href)
    if parsed.scheme not in ("http", "https"):
        return False
    if mode == "all":
        return True
    if mode == "non-wx":
        return parsed.netloc.lower() != WECHAT_LINK_HOST
    return False


def _text_of(children: list, start: int) -> tuple[str, int]:
    parts = []
    index = start + 1
    while index < len(children) and children[index].type != "link_close":
        parts.append(children[index].content)
        index += 1
    return "".join(parts), index


def references_html(references: list[tuple[int, str, str]]) -> str:
    items = "".join(
        f'<li style="margin: 0.2em 0;"><span>[{number}] {html.escape(text)}: </span>'
        f'<em style="word-break: break-all;">{html.escape(href)}</em></li>'
        for number, href, text in references
    )
    return (
        f'<section class="{REFERENCES_CLASS}" style="margin-top: 2em; font-size: 0.85em; color: #888;">'
        '<p style="font-weight: bold;">References</p>'
        f'<ol style="list-style-type: none; padding-left: 0;">{items}</ol></section>\n'
    )


class Links(StructuralPlugin):
    descriptor = PluginDescriptor(
        name="Links",
        category=PluginCategory.STRUCTURAL,
        description="Footnote-style external links",
    )

    def install(self, md: MarkdownIt, context: RenderContext) -> None:
        mode = context.settings.link_footnote_mode
        if mode == "none":
            return

        def footnote_links(state: StateCore) -> None:
            numbers: dict[str, int] = {}
            references: list[tuple[int, str, str]] = []
            for block in state.tokens:
                if block.type != "inline" or not block.children:
                    continue
                children = block.children
                rewritten: list[Token] = []
                index = 0
                while index < len(children):
                    child = children[index]
                    href = str(child.attrGet("href") or "") if child.type == "link_open" else ""
                    if not href or not should_footnote(href, mode):
                        rewritten.append(child)
                        index += 1
                        continue

                    text, close = _text_of(children, index)
                    if href not in numbers:
                        numbers[href] = len(numbers) + 1
                        references.append((numbers[href], href, text or href))
                    opening = Token("html_inline", "", 0)
                    opening.content = '<span class="zp-footnote-link">'
                    closing = Token("html_inline", "", 0)
                    closing.content = f'</span><sup class="zp-footnote-ref">[{numbers[href]}]</sup>'
                    rewritten.append(opening)
                    rewritten.extend(children[index + 1:close])
                    rewritten.append(closing)
                    index = close + 1
                block.children = rewritten

            if references:
                block = Token("html_block", "", 0)
                block.content = references_html(references)
                state.tokens.append(block)

        md.core.ruler.push("link_footnotes", footnote_links)
