"""Asset catalogue: theme and highlight-style lookups by name.

The pipeline only reads from a catalogue. Hosts plug in their own
implementation of :class:`AssetCatalogue`; :class:`PygmentsAssetCatalogue`
serves every installed Pygments style plus any styles registered at runtime.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

import structlog
from pygments.formatters import HtmlFormatter
from pygments.styles import get_all_styles, get_style_by_name
from pygments.token import Token
from pygments.util import ClassNotFound

from ..constants import DEFAULT_DARK_THEME, DEFAULT_LIGHT_THEME
from ..css.colors import default_colors, is_dark, parse_colors_from_css

logger = structlog.get_logger(__name__)

CODE_CSS_PREFIX = ".hljs"


@dataclass(frozen=True)
class ThemeDescriptor:
    """A named stylesheet plus its light/dark classification.

    ``style`` names the Pygments style that renders tokens for this theme.
    """

    name: str
    css_text: str
    is_dark: bool
    style: str = ""


@dataclass(frozen=True)
class HighlightStyle:
    name: str
    css: str


@runtime_checkable
class AssetCatalogue(Protocol):
    """Read-only lookups implemented by the host application."""

    def lookup_theme(self, name: str) -> Optional[ThemeDescriptor]:
        ...

    def lookup_highlight_style(self, name: str) -> Optional[HighlightStyle]:
        ...


def style_css(style_name: str) -> str:
    """Render a Pygments style as CSS scoped to ``.hljs``.

    The first rule always declares the block background and text colour so
    colour extraction does not depend on the style defining a text token.

    Raises:
        ClassNotFound: If the style is not installed
    """
    style = get_style_by_name(style_name)
    background = style.background_color or "#ffffff"
    text = style.style_for_token(Token.Text).get("color")
    foreground = f"#{text}" if text else default_colors(is_dark(background)).foreground
    defs = HtmlFormatter(style=style).get_style_defs(CODE_CSS_PREFIX)
    return f"{CODE_CSS_PREFIX} {{ background: {background}; color: {foreground}; }}\n{defs}"


class PygmentsAssetCatalogue:
    """Catalogue backed by the installed Pygments styles.

    Extra highlight styles and embeddable assets can be registered at
    runtime; registered styles shadow installed ones of the same name.
    """

    def __init__(self, base_url: str = ""):
        self.base_url = base_url
        self._styles: dict[str, HighlightStyle] = {}
        self._assets: dict[str, str] = {}

    def register_highlight_style(self, name: str, css: str) -> None:
        self._styles[name] = HighlightStyle(name=name, css=css)

    def register_asset(self, path: str, url: str) -> None:
        self._assets[path] = url

    def list_highlight_styles(self) -> list[str]:
        return sorted(set(get_all_styles()) | set(self._styles))

    def lookup_highlight_style(self, name: str) -> Optional[HighlightStyle]:
        if name in self._styles:
            return self._styles[name]
        try:
            return HighlightStyle(name=name, css=style_css(name))
        except ClassNotFound:
            return None

    def lookup_theme(self, name: str) -> Optional[ThemeDescriptor]:
        """Look up a theme descriptor.

        Args:
            name: Exact style name

        Returns:
            ThemeDescriptor, or None on a miss
        """
        if name in self._styles:
            css = self._styles[name].css
            colors = parse_colors_from_css(css)
            dark = colors.is_dark if colors else False
            # Registered CSS has no token rules of its own, borrow a built-in renderer
            return ThemeDescriptor(name=name, css_text=css, is_dark=dark, style=DEFAULT_DARK_THEME if dark else DEFAULT_LIGHT_THEME)
        try:
            style = get_style_by_name(name)
        except ClassNotFound:
            logger.debug("Theme not in catalogue", theme=name)
            return None
        return ThemeDescriptor(
            name=name,
            css_text=style_css(name),
            is_dark=is_dark(style.background_color or "#ffffff"),
            style=name,
        )

    def resolve_asset(self, path: str) -> Optional[str]:
        """Map an embedded file reference to a URL the output can load."""
        if path in self._assets:
            return self._assets[path]
        if self.base_url:
            return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        return None
