"""TeX and AsciiMath placeholders rendered out of band."""

import html

from markdown_it import MarkdownIt
from mdit_py_plugins.dollarmath import dollarmath_plugin

from ...core.context import RenderContext
from ..base import PluginCategory, PluginDescriptor, StructuralPlugin

MATH_KIND = "math"


def render_math(context: RenderContext, source: str, display: bool, syntax: str = "") -> str:
    """Emit a math placeholder and queue its render job.

    The placeholder shows the escaped source until the job completes.
    """
    syntax = syntax or context.settings.math
    source = source.strip()
    job = context.queue.enqueue(MATH_KIND, source, display=display, syntax=syntax)
    escaped = html.escape(source)
    if display:
        return (
            f'<section id="{job.id}" class="block-math-svg" data-math-syntax="{syntax}" '
            f'data-render-state="pending">{escaped}</section>\n'
        )
    return (
        f'<span id="{job.id}" class="inline-math-svg" data-math-syntax="{syntax}" '
        f'data-render-state="pending">{escaped}</span>'
    )


class Math(StructuralPlugin):
    """``$...$`` and ``$$...$$`` math."""

    descriptor = PluginDescriptor(
        name="Math",
        category=PluginCategory.STRUCTURAL,
        description="Inline and block math placeholders",
    )

    def install(self, md: MarkdownIt, context: RenderContext) -> None:
        md.use(dollarmath_plugin, double_inline=True)

        def render_inline(tokens, idx, options, env):
            return render_math(context, tokens[idx].content, display=False)

        def render_block(tokens, idx, options, env):
            return render_math(context, tokens[idx].content, display=True)

        md.renderer.rules["math_inline"] = render_inline
        md.renderer.rules["math_inline_double"] = render_block
        md.renderer.rules["math_block"] = render_block
        md.renderer.rules["math_block_label"] = render_block
