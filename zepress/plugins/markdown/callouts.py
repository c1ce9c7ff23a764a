"""``> [!type] title`` callout blockquotes rendered as admonitions."""

import re

from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore

from ...core.context import RenderContext
from ..base import PluginCategory, PluginDescriptor, StructuralPlugin
from .admonition import admonition_close, admonition_open

CALLOUT_RE = re.compile(r"^\[!([\w-]+)\]([+-]?)[ \t]*(.*)$")


def _matching_close(tokens: list, start: int) -> int:
    level = tokens[start].level
    for index in range(start + 1, len(tokens)):
        token = tokens[index]
        if token.type == "blockquote_close" and token.level == level:
            return index
    return -1


def mark_callouts(state: StateCore) -> None:
    """Tag callout blockquotes and strip the marker line before inline parsing."""
    tokens = state.tokens
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if (
            token.type == "blockquote_open"
            and index + 3 < len(tokens)
            and tokens[index + 1].type == "paragraph_open"
            and tokens[index + 2].type == "inline"
        ):
            inline = tokens[index + 2]
            first_line, _, remainder = inline.content.partition("\n")
            match = CALLOUT_RE.match(first_line.strip())
            close = _matching_close(tokens, index) if match else -1
            if match and close != -1:
                kind, _, title = match.groups()
                token.meta["callout"] = {"type": kind, "title": title.strip()}
                tokens[close].meta["callout"] = True
                if remainder.strip():
                    inline.content = remainder
                else:
                    # Marker was the whole paragraph
                    del tokens[index + 1:index + 4]
        index += 1


class Callouts(StructuralPlugin):
    descriptor = PluginDescriptor(
        name="Callouts",
        category=PluginCategory.STRUCTURAL,
        description="Callout blockquotes rendered as admonitions",
    )

    def install(self, md: MarkdownIt, context: RenderContext) -> None:
        md.core.ruler.before("inline", "callouts", mark_callouts)
        default_open = md.renderer.rules.get("blockquote_open")
        default_close = md.renderer.rules.get("blockquote_close")

        def render_open(tokens, idx, options, env):
            callout = tokens[idx].meta.get("callout")
            if callout:
                return admonition_open(callout["type"], callout["title"])
            if default_open is not None:
                return default_open(tokens, idx, options, env)
            return md.renderer.renderToken(tokens, idx, options, env)

        def render_close(tokens, idx, options, env):
            if tokens[idx].meta.get("callout"):
                return admonition_close()
            if default_close is not None:
                return default_close(tokens, idx, options, env)
            return md.renderer.renderToken(tokens, idx, options, env)

        md.renderer.rules["blockquote_open"] = render_open
        md.renderer.rules["blockquote_close"] = render_close
