"""``==text==`` highlights."""

from markdown_it import MarkdownIt
from markdown_it.rules_inline import StateInline

from ...core.context import RenderContext
from ..base import PluginCategory, PluginDescriptor, StructuralPlugin

HIGHLIGHT_OPEN = '<mark class="note-highlight" style="background-color: rgba(255, 208, 0, 0.4);">'

MARKER = "=="


def mark_rule(state: StateInline, silent: bool) -> bool:
    """Parse ``==text==``; the content may hold other inline markup."""
    src = state.src
    start = state.pos
    if not src.startswith(MARKER, start):
        return False
    content_start = start + len(MARKER)
    end = src.find(MARKER, content_start)
    if end == -1 or end + len(MARKER) > state.posMax:
        return False
    content = src[content_start:end]
    if not content or content[0].isspace() or content[-1].isspace():
        return False

    if not silent:
        token = state.push("mark_open", "mark", 1)
        token.markup = MARKER
        old_max = state.posMax
        state.pos = content_start
        state.posMax = end
        state.md.inline.tokenize(state)
        state.posMax = old_max
        token = state.push("mark_close", "mark", -1)
        token.markup = MARKER
    state.pos = end + len(MARKER)
    return True


class TextHighlight(StructuralPlugin):
    descriptor = PluginDescriptor(
        name="TextHighlight",
        category=PluginCategory.STRUCTURAL,
        description="Highlighted text spans",
    )

    def install(self, md: MarkdownIt, context: RenderContext) -> None:
        md.inline.ruler.before("emphasis", "mark", mark_rule)
        md.renderer.rules["mark_open"] = lambda tokens, idx, options, env: HIGHLIGHT_OPEN
        md.renderer.rules["mark_close"] = lambda tokens, idx, options, env: "</mark>"
