"""Default fenced-code rendering through the shared highlighter."""

import html

from markdown_it import MarkdownIt

from ...core.context import RenderContext
from ..base import PluginCategory, PluginDescriptor, StructuralPlugin


def fence_language(info: str) -> str:
    return info.strip().split(maxsplit=1)[0].lower() if info and info.strip() else ""


class CodeHighlight(StructuralPlugin):
    """Highlight fenced code while the document is rendered.

    Blocks are tagged with the theme that produced them so the code-block
    post-processor can reuse the markup instead of highlighting again.
    """

    descriptor = PluginDescriptor(
        name="CodeHighlight",
        category=PluginCategory.STRUCTURAL,
        description="Syntax highlighting for fenced code",
    )

    def install(self, md: MarkdownIt, context: RenderContext) -> None:
        def render_fence(tokens, idx, options, env):
            token = tokens[idx]
            language = fence_language(token.info) or "text"
            theme = context.themes.resolve(context.settings.default_highlight)
            result = context.highlighter.highlight(token.content, language, theme)
            attrs = f'class="language-{html.escape(language)}"'
            if not result.fallback:
                attrs += f' data-highlighted="{html.escape(result.theme)}"'
            return f"<pre><code {attrs}>{result.markup}</code></pre>\n"

        md.renderer.rules["fence"] = render_fence
