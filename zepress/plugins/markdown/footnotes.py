"""Markdown footnotes without in-page anchors."""

from markdown_it import MarkdownIt
from mdit_py_plugins.footnote import footnote_plugin

from ...core.context import RenderContext
from ..base import PluginCategory, PluginDescriptor, StructuralPlugin


class Footnotes(StructuralPlugin):
    descriptor = PluginDescriptor(
        name="Footnotes",
        category=PluginCategory.STRUCTURAL,
        description="Footnotes rendered as plain numbered notes",
    )

    def install(self, md: MarkdownIt, context: RenderContext) -> None:
        md.use(footnote_plugin)

        def render_ref(tokens, idx, options, env):
            number = tokens[idx].meta["id"] + 1
            return f'<sup class="footnote-ref">[{number}]</sup>'

        def render_block_open(tokens, idx, options, env):
            return (
                '<section class="footnotes" style="margin-top: 2em; font-size: 0.85em; color: #888;">'
                '<hr style="border: none; border-top: 1px solid #eee;">\n<ol class="footnotes-list">\n'
            )

        def render_block_close(tokens, idx, options, env):
            return "</ol>\n</section>\n"

        def render_item_open(tokens, idx, options, env):
            return '<li class="footnote-item">'

        def render_anchor(tokens, idx, options, env):
            return ""

        md.renderer.rules["footnote_ref"] = render_ref
        md.renderer.rules["footnote_block_open"] = render_block_open
        md.renderer.rules["footnote_block_close"] = render_block_close
        md.renderer.rules["footnote_open"] = render_item_open
        md.renderer.rules["footnote_anchor"] = render_anchor
