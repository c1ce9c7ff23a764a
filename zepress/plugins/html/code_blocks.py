"""Code block rendering: highlighting, line numbers and window chrome.

Every ``pre > code`` block goes through the same steps: extract the language,
resolve the theme, highlight (or reuse markup the Markdown stage already
produced for the same theme), optionally number the lines, optionally add
the window chrome, then bake concrete colours and metadata attributes onto
the ``pre`` element. A block that fails is restored to its original markup.
"""

import copy
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import Stylesheet

from ...assets.catalogue import AssetCatalogue, PygmentsAssetCatalogue, ThemeDescriptor
from ...config.schema import ConfigField, select, toggle
from ...config.store import ConfigStore
from ...constants import (
    CODE_BORDER,
    CODE_LANGUAGE_LABEL_CLASS,
    CODE_WINDOW_CLASS,
    CODE_WINDOW_STYLE_ID,
    HIGHLIGHT_STYLE_INHERIT,
    HIGHLIGHT_STYLE_NONE,
    LABEL_COLOR_DARK,
    LABEL_COLOR_LIGHT,
    LINE_NUMBER_CLASS,
    LINE_NUMBER_COLOR_DARK,
    LINE_NUMBER_COLOR_LIGHT,
    PLAIN_LANGUAGE,
)
from ...core.config import Settings
from ...css.colors import ThemeColors, default_colors, parse_colors_from_css
from ...highlight.highlighter import Highlighter, plain_markup
from ...highlight.themes import ThemeResolver, display_name
from ...utils.html import add_class, create_element_with_attributes, format_style, get_classes, merge_style, parse_html, serialize_html
from ..base import PluginCategory, PluginDescriptor, PostProcessingPlugin

HEADER_CLASS = "mac-code-header"
DOT_CLASS = "mac-code-dot"

CODE_WINDOW_CSS = f"""
.{CODE_WINDOW_CLASS} {{ position: relative; }}
.{HEADER_CLASS} {{ position: absolute; top: 0; left: 0; right: 0; height: 32px; display: flex; align-items: center; padding: 0 12px; border-radius: 8px 8px 0 0; background: linear-gradient(180deg, rgba(255, 255, 255, 0.08), rgba(0, 0, 0, 0.04)); }}
.{CODE_WINDOW_CLASS}[data-theme-dark="true"] .{HEADER_CLASS} {{ background: linear-gradient(180deg, rgba(255, 255, 255, 0.05), rgba(0, 0, 0, 0.2)); }}
.{DOT_CLASS} {{ display: inline-block; width: 12px; height: 12px; margin-right: 8px; border-radius: 50%; }}
.{DOT_CLASS}-close {{ background: #ff5f56; }}
.{DOT_CLASS}-minimize {{ background: #ffbd2e; }}
.{DOT_CLASS}-zoom {{ background: #27c93f; }}
.{CODE_LANGUAGE_LABEL_CLASS} {{ position: absolute; top: 8px; right: 12px; font-size: 12px; line-height: 16px; text-transform: uppercase; letter-spacing: 0.05em; }}
.{CODE_WINDOW_CLASS}::-webkit-scrollbar {{ height: 6px; }}
.{CODE_WINDOW_CLASS}::-webkit-scrollbar-thumb {{ background: rgba(0, 0, 0, 0.2); border-radius: 3px; }}
.{CODE_WINDOW_CLASS}[data-theme-dark="true"]::-webkit-scrollbar-thumb {{ background: rgba(255, 255, 255, 0.2); }}
"""


def code_language(code: Tag) -> str:
    """Language from a ``language-xxx``/``lang-xxx`` class on code or pre."""
    candidates = [code]
    if isinstance(code.parent, Tag):
        candidates.append(code.parent)
    for element in candidates:
        for cls in get_classes(element):
            for prefix in ("language-", "lang-"):
                if cls.startswith(prefix) and len(cls) > len(prefix):
                    return cls[len(prefix):].lower()
    return PLAIN_LANGUAGE


class CodeBlocks(PostProcessingPlugin):
    """Highlight code blocks and bake their appearance into inline styles."""

    descriptor = PluginDescriptor(
        name="CodeBlocks",
        category=PluginCategory.POST_PROCESSING,
        description="Syntax highlighting, line numbers and window chrome for code blocks",
    )
    default_config = {
        "show_line_numbers": False,
        "highlight_style": HIGHLIGHT_STYLE_INHERIT,
        "mac_window": False,
    }

    def __init__(
        self,
        store: Optional[ConfigStore] = None,
        themes: Optional[ThemeResolver] = None,
        highlighter: Optional[Highlighter] = None,
        catalogue: Optional[AssetCatalogue] = None,
    ):
        self.catalogue = catalogue or PygmentsAssetCatalogue()
        self.themes = themes or ThemeResolver(self.catalogue)
        self.highlighter = highlighter or Highlighter()
        super().__init__(store)

    def get_config_fields(self) -> Dict[str, ConfigField]:
        options = [
            (HIGHLIGHT_STYLE_INHERIT, "Follow global setting"),
            (HIGHLIGHT_STYLE_NONE, "None"),
        ]
        options.extend((name, display_name(name)) for name in self.themes.theme_names())
        return {
            "show_line_numbers": toggle("Line numbers", "Prefix every line with its number"),
            "highlight_style": select("Highlight style", options, "Theme used to colour code"),
            "mac_window": toggle("Window chrome", "Draw a window header with the language label"),
        }

    def process(self, html: str, settings: Settings) -> str:
        soup = parse_html(html)
        blocks = soup.select("pre > code")
        if not blocks:
            return html

        config = self.get_config()
        style_name = config["highlight_style"]
        if style_name == HIGHLIGHT_STYLE_INHERIT:
            style_name = settings.default_highlight
        plain = style_name == HIGHLIGHT_STYLE_NONE
        theme = self.themes.resolve(settings.default_highlight if plain else style_name)
        colors = self.theme_colors(theme)

        rendered = 0
        for index, code in enumerate(blocks):
            pre = code.parent
            original = copy.copy(pre)
            try:
                self._render_block(soup, pre, code, theme, colors, config, plain)
                rendered += 1
            except Exception as e:
                self.logger.warning("Code block left unrendered", index=index, error=str(e))
                pre.replace_with(original)

        if config["mac_window"] and rendered:
            self._inject_window_styles(soup)

        self.logger.debug("Rendered code blocks", blocks=len(blocks), rendered=rendered, theme=theme.name)
        return serialize_html(soup)

    def theme_colors(self, theme: ThemeDescriptor) -> ThemeColors:
        """Block colours: theme CSS, then catalogue CSS, then the default pair."""
        colors = parse_colors_from_css(theme.css_text)
        if colors is not None:
            return colors
        try:
            asset = self.catalogue.lookup_highlight_style(theme.name)
        except Exception as e:
            self.logger.warning("Highlight style lookup failed", theme=theme.name, error=str(e))
            asset = None
        if asset is not None:
            colors = parse_colors_from_css(asset.css)
            if colors is not None:
                return colors
        return default_colors(theme.is_dark)

    def _render_block(
        self,
        soup: BeautifulSoup,
        pre: Tag,
        code: Tag,
        theme: ThemeDescriptor,
        colors: ThemeColors,
        config: Dict[str, Any],
        plain: bool,
    ) -> None:
        language = code_language(code)
        dark = theme.is_dark

        # Decorations from a previous run
        for selector in (f"span.{LINE_NUMBER_CLASS}", f".{HEADER_CLASS}", f".{CODE_LANGUAGE_LABEL_CLASS}"):
            for element in pre.select(selector):
                element.decompose()

        if plain:
            markup = plain_markup(code.get_text())
            theme_name = HIGHLIGHT_STYLE_NONE
        elif code.get("data-highlighted") == theme.name:
            markup = code.decode_contents()
            theme_name = theme.name
        else:
            result = self.highlighter.highlight(code.get_text(), language, theme)
            markup = result.markup
            theme_name = HIGHLIGHT_STYLE_NONE if result.fallback else result.theme

        code.clear()
        code.append(parse_html(markup))
        if theme_name != HIGHLIGHT_STYLE_NONE:
            code["data-highlighted"] = theme_name
        elif code.has_attr("data-highlighted"):
            del code["data-highlighted"]
        add_class(code, f"language-{language}")

        if config["show_line_numbers"]:
            self._number_lines(soup, code, dark)

        if config["mac_window"]:
            add_class(pre, CODE_WINDOW_CLASS)
            pre.insert(0, self._window_header(soup, language, dark))

        merge_style(pre, {
            "background": colors.background,
            "color": colors.foreground,
            "padding": "40px 12px 8px 12px" if config["mac_window"] else "8px 12px",
            "margin": "0",
            "font-size": "14px",
            "line-height": "1.4",
            "border-radius": "8px",
            "border": CODE_BORDER,
            "white-space": "pre",
            "overflow-x": "auto",
            **({"position": "relative"} if config["mac_window"] else {}),
        })
        merge_style(code, {
            "background": "transparent",
            "color": "inherit",
            "padding": "0 0 16px 0",
            "display": "block",
            "font-family": "Menlo, Monaco, Consolas, 'Courier New', monospace",
        })

        pre["data-code-block"] = "true"
        pre["data-language"] = language
        pre["data-show-line-numbers"] = "true" if config["show_line_numbers"] else "false"
        pre["data-highlight-style"] = theme_name
        pre["data-theme-dark"] = "true" if dark else "false"

    def _line_number(self, soup: BeautifulSoup, number: int, dark: bool) -> Tag:
        border = "rgba(255, 255, 255, 0.1)" if dark else "rgba(0, 0, 0, 0.1)"
        style = format_style({
            "display": "inline-block",
            "width": "2.5em",
            "text-align": "right",
            "padding-right": "1em",
            "margin-right": "0.5em",
            "border-right": f"1px solid {border}",
            "color": LINE_NUMBER_COLOR_DARK if dark else LINE_NUMBER_COLOR_LIGHT,
            "user-select": "none",
            "-webkit-user-select": "none",
        })
        return create_element_with_attributes(
            soup, "span", {"class": LINE_NUMBER_CLASS, "style": style}, text=str(number)
        )

    def _number_lines(self, soup: BeautifulSoup, code: Tag, dark: bool) -> None:
        lines = [
            span for span in code.find_all("span", recursive=False)
            if "line" in get_classes(span)
        ]
        if lines:
            # One span per line: prefix inside each span
            for number, line in enumerate(lines, start=1):
                line.insert(0, self._line_number(soup, number, dark))
            return

        # Plain newline-separated text
        trailing_newline = code.get_text().endswith("\n")
        counter = 1
        code.insert(0, self._line_number(soup, counter, dark))
        for text in [node for node in code.find_all(string=True) if "\n" in node]:
            pieces = text.split("\n")
            replacement: list = [NavigableString(pieces[0])] if pieces[0] else []
            for piece in pieces[1:]:
                counter += 1
                replacement.append(NavigableString("\n"))
                replacement.append(self._line_number(soup, counter, dark))
                if piece:
                    replacement.append(NavigableString(piece))
            text.replace_with(*replacement)
        if trailing_newline and counter > 1:
            code.find_all("span", class_=LINE_NUMBER_CLASS)[-1].decompose()

    def _window_header(self, soup: BeautifulSoup, language: str, dark: bool) -> Tag:
        header = create_element_with_attributes(soup, "span", {"class": HEADER_CLASS})
        for name in ("close", "minimize", "zoom"):
            header.append(create_element_with_attributes(
                soup, "span", {"class": [DOT_CLASS, f"{DOT_CLASS}-{name}"]}
            ))
        label = create_element_with_attributes(
            soup,
            "span",
            {
                "class": CODE_LANGUAGE_LABEL_CLASS,
                "style": format_style({"color": LABEL_COLOR_DARK if dark else LABEL_COLOR_LIGHT}),
            },
            text=language,
        )
        header.append(label)
        return header

    def _inject_window_styles(self, soup: BeautifulSoup) -> None:
        if soup.find("style", id=CODE_WINDOW_STYLE_ID) is not None:
            return
        style = create_element_with_attributes(soup, "style", {"id": CODE_WINDOW_STYLE_ID})
        style.string = Stylesheet(CODE_WINDOW_CSS)
        container = soup.body or soup
        container.insert(0, style)
