"""Fenced-code dispatch for math, diagrams, cards and admonitions.

The info string is checked in a fixed order: math marker, ``mermaid``,
``mpcard``, ``ad-*``. Anything else, or a special fence that fails to
render, goes to the fence renderer installed before this one.
"""

import html
import re
from typing import Optional

import structlog
from markdown_it import MarkdownIt

from ...constants import ADMONITION_FENCE_PREFIX, CARD_FENCE, MATH_FENCE_LANGUAGES, MERMAID_FENCE
from ...core.context import RenderContext
from ...utils.html import parse_html
from ..base import PluginCategory, PluginDescriptor, StructuralPlugin
from ..html.wechat_adapter import CARD_SOURCE_ATTR
from .admonition import render_admonition
from .code_highlight import fence_language
from .math import render_math

logger = structlog.get_logger(__name__)

MERMAID_KIND = "mermaid"
_BRACED_TITLE_RE = re.compile(r"\{\s*title\s*:\s*(.*?)\s*\}", re.IGNORECASE)
_OPTION_LINE_RE = re.compile(r"^(title|collapse|icon|color)\s*:\s*(.*)$", re.IGNORECASE)


def parse_admonition(info: str, content: str) -> tuple[str, str, str]:
    """Split an ``ad-*`` fence into (type, title, markdown body).

    The title starts as the rest of the info string (plain or as
    ``{title: ...}``). Leading option lines follow, and a ``title:`` option
    replaces it. Without option lines, a first line followed by a blank line
    becomes ``TITLE: line``, where TITLE is the title so far or the type.
    """
    head, _, rest = info.strip().partition(" ")
    kind = head[len(ADMONITION_FENCE_PREFIX):].lower() or "note"
    rest = rest.strip()

    title = ""
    braced = _BRACED_TITLE_RE.search(rest)
    if braced:
        title = braced.group(1).strip("\"'")
    elif rest:
        title = rest

    lines = content.rstrip("\n").split("\n")
    had_options = False
    while lines:
        option = _OPTION_LINE_RE.match(lines[0].strip())
        if not option:
            break
        if option.group(1).lower() == "title" and option.group(2).strip():
            title = option.group(2).strip()
        lines.pop(0)
        had_options = True

    if not had_options and len(lines) >= 2 and lines[0].strip() and not lines[1].strip():
        title = f"{(title or kind).upper()}: {lines[0].strip()}"
        lines = lines[2:]

    return kind, title, "\n".join(lines).strip()


def render_card(content: str) -> str:
    """Preview of an official-account card; keeps the editor markup for export."""
    soup = parse_html(content)
    card = soup.find(attrs={"data-id": True})
    if card is None:
        return '<span class="note-mpcard-error">Invalid card: missing data-id</span>\n'

    def attr(name: str) -> str:
        return html.escape(str(card.get(name, "")))

    return (
        f'<section class="note-mpcard-wrapper" {CARD_SOURCE_ATTR}="{html.escape(content.strip())}" '
        'style="margin: 1em 0; padding: 12px 16px; border: 1px solid #eee; border-radius: 8px;">'
        '<section class="note-mpcard-content" style="display: flex; align-items: center;">'
        f'<img class="note-mpcard-headimg" src="{attr("data-headimg")}" alt="{attr("data-nickname")}" '
        'style="width: 48px; height: 48px; border-radius: 50%; margin-right: 12px;">'
        '<section class="note-mpcard-info">'
        f'<section class="note-mpcard-nickname" style="font-weight: bold;">{attr("data-nickname")}</section>'
        f'<section class="note-mpcard-signature" style="font-size: 13px; color: #888;">{attr("data-signature")}</section>'
        "</section></section>"
        '<section class="note-mpcard-foot" style="margin-top: 8px; font-size: 12px; color: #aaa;">Official account</section>'
        "</section>\n"
    )


class CodeRenderer(StructuralPlugin):
    descriptor = PluginDescriptor(
        name="CodeRenderer",
        category=PluginCategory.STRUCTURAL,
        description="Math, diagram, card and admonition fences",
    )

    def install(self, md: MarkdownIt, context: RenderContext) -> None:
        previous = md.renderer.rules.get("fence")

        def fallback(tokens, idx, options, env):
            if previous is not None:
                return previous(tokens, idx, options, env)
            return md.renderer.renderToken(tokens, idx, options, env)

        def render_fence(tokens, idx, options, env):
            token = tokens[idx]
            language = fence_language(token.info)
            try:
                rendered = self._render_special(md, context, language, token.info, token.content)
            except Exception as e:
                self.logger.warning("Special fence failed, rendering as code", language=language, error=str(e))
                rendered = None
            if rendered is None:
                return fallback(tokens, idx, options, env)
            return rendered

        md.renderer.rules["fence"] = render_fence

    def _render_special(
        self, md: MarkdownIt, context: RenderContext, language: str, info: str, content: str
    ) -> Optional[str]:
        if language in MATH_FENCE_LANGUAGES:
            return render_math(context, content, display=True, syntax=MATH_FENCE_LANGUAGES[language])
        if language == MERMAID_FENCE:
            job = context.queue.enqueue(MERMAID_KIND, content)
            return (
                f'<section id="{job.id}" class="note-mermaid" data-render-state="pending" '
                'style="text-align: center;"></section>\n'
            )
        if language == CARD_FENCE:
            return render_card(content)
        if language.startswith(ADMONITION_FENCE_PREFIX):
            kind, title, body = parse_admonition(info, content)
            return render_admonition(kind, title, md.render(body) if body else "")
        return None
