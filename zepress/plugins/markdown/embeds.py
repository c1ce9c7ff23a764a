"""Vault-style embeds and wiki links.

``![[file]]`` embeds an image or another note, ``[[note|alias]]`` links to a
note. Neither has a meaning outside the editor, so links become plain styled
text and embedded notes become a quote or their rendered content.
"""

import html
import re
from typing import Callable, Optional

from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore
from markdown_it.rules_inline import StateInline

from ...constants import DEFAULT_IMAGE_STYLE, IMAGE_EXTENSIONS
from ...core.context import RenderContext
from ..base import PluginCategory, PluginDescriptor, StructuralPlugin

EMBED_TOKEN = "wiki_embed"
LINK_TOKEN = "wiki_link"

_BLOCK_ID_RE = re.compile(r"[ \t]+\^[A-Za-z0-9-]+[ \t]*$")
_SIZE_RE = re.compile(r"^(\d+)(?:x(\d+))?$")

EmbedLoader = Callable[[str], Optional[str]]


def split_target(inner: str) -> tuple[str, str]:
    """Split ``target|alias``; the target keeps any ``#section`` suffix."""
    target, _, alias = inner.partition("|")
    return target.strip(), alias.strip()


def is_image(target: str) -> bool:
    path = target.split("#", 1)[0]
    return path.rsplit(".", 1)[-1].lower() in IMAGE_EXTENSIONS if "." in path else False


def strip_block_ids(state: StateCore) -> None:
    """Drop trailing ``^block-id`` marks from paragraphs and list items."""
    for token in state.tokens:
        if token.type == "inline" and "^" in token.content:
            token.content = "\n".join(_BLOCK_ID_RE.sub("", line) for line in token.content.split("\n"))


def wiki_rule(state: StateInline, silent: bool) -> bool:
    src = state.src
    pos = state.pos
    embed = src.startswith("![[", pos)
    if not embed and not src.startswith("[[", pos):
        return False
    start = pos + (3 if embed else 2)
    end = src.find("]]", start)
    if end == -1:
        return False
    inner = src[start:end]
    if not inner.strip() or "\n" in inner or "[" in inner:
        return False

    if not silent:
        target, alias = split_target(inner)
        token = state.push(EMBED_TOKEN if embed else LINK_TOKEN, "", 0)
        token.content = inner
        token.meta = {"target": target, "alias": alias}
    state.pos = end + 2
    return True


def render_image(target: str, alias: str, context: RenderContext) -> str:
    url = target
    resolve_asset = getattr(context.catalogue, "resolve_asset", None)
    if resolve_asset is not None:
        url = resolve_asset(target) or target

    style = DEFAULT_IMAGE_STYLE
    alt = alias
    size = _SIZE_RE.match(alias)
    if size:
        # A numeric alias is a size, not alt text
        alt = ""
        width, height = size.groups()
        style = f"max-width: 100%; width: {width}px; height: {f'{height}px' if height else 'auto'};"
    return (
        f'<img src="{html.escape(url)}" alt="{html.escape(alt or target)}" '
        f'data-embed="{html.escape(target)}" style="{style}">'
    )


def render_link(target: str, alias: str) -> str:
    label = alias or target.split("#", 1)[0] or target
    return f'<span class="zp-wiki-link" style="color: var(--primary-color, #7852ee);">{html.escape(label)}</span>'


class Embeds(StructuralPlugin):
    """Embeds, wiki links and block-id marks."""

    descriptor = PluginDescriptor(
        name="Embeds",
        category=PluginCategory.STRUCTURAL,
        description="Embedded files and wiki links",
    )

    def __init__(self, store=None, loader: Optional[EmbedLoader] = None):
        """Initialize the plugin.

        Args:
            store: Configuration store
            loader: Returns the Markdown source of an embedded note, or None
                when it cannot be found
        """
        self.loader = loader
        super().__init__(store)

    def install(self, md: MarkdownIt, context: RenderContext) -> None:
        md.core.ruler.before("inline", "block_ids", strip_block_ids)
        md.inline.ruler.before("link", "wiki", wiki_rule)

        def render_embed(tokens, idx, options, env):
            target = tokens[idx].meta["target"]
            alias = tokens[idx].meta["alias"]
            if is_image(target):
                return render_image(target, alias, context)
            return self.render_note(md, context, target, alias)

        def render_wiki_link(tokens, idx, options, env):
            return render_link(tokens[idx].meta["target"], tokens[idx].meta["alias"])

        md.renderer.rules[EMBED_TOKEN] = render_embed
        md.renderer.rules[LINK_TOKEN] = render_wiki_link

    def render_note(self, md: MarkdownIt, context: RenderContext, target: str, alias: str) -> str:
        """Render an embedded note according to ``settings.embed_style``."""
        name = alias or target
        body = None
        if context.settings.embed_style == "content" and self.loader is not None:
            try:
                body = self.loader(target)
            except Exception as e:
                self.logger.warning("Embed loader failed", target=target, error=str(e))

        if body is None:
            return (
                '<span class="zp-embed-quote" style="display: block; padding: 0.5em 1em; '
                'border-left: 3px solid #ccc; color: #666;">'
                f"{html.escape(name)}</span>"
            )
        return (
            '<span class="zp-embed-content" style="display: block; padding: 0.5em 1em; '
            'border: 1px solid #eee; border-radius: 4px;">'
            f"{md.render(body)}</span>"
        )
