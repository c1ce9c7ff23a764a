"""Colour parsing and light/dark classification.

The luminance formula and its threshold are shared by every component that
picks a legible colour for a theme (language labels, line numbers, window
chrome), so they live here and nowhere else.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

import tinycss2
from tinycss2 import ast

from ..constants import DEFAULT_DARK_COLORS, DEFAULT_LIGHT_COLORS, LUMINANCE_DARK_THRESHOLD

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_RGB_RE = re.compile(r"^rgba?\(\s*([^)]*)\)$", re.IGNORECASE)
_COLOR_TOKEN_RE = re.compile(r"#[0-9a-fA-F]{3,8}\b|rgba?\([^)]*\)|\b[a-zA-Z]+\b")

_NAMED_COLORS = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
    "silver": (192, 192, 192),
    "navy": (0, 0, 128),
}

DEFAULT_COLOR_SELECTORS = (".hljs", ".highlight", "pre")

# At-rules whose block holds style rules a theme may scope its colours in
_GROUPING_AT_KEYWORDS = frozenset({"media", "supports", "layer", "container"})


@dataclass(frozen=True)
class ThemeColors:
    """Concrete background/foreground pair for a code block."""

    background: str
    foreground: str

    @property
    def is_dark(self) -> bool:
        return is_dark(self.background)


def parse_rgb(color: str) -> Optional[tuple[int, int, int]]:
    """Parse a CSS colour into an RGB triple.

    Supports ``#rgb``, ``#rgba``, ``#rrggbb``, ``#rrggbbaa``, ``rgb()``,
    ``rgba()`` and a handful of named colours.

    Args:
        color: CSS colour text

    Returns:
        (R, G, B) in 0-255, or None if the value is not understood
    """
    value = color.strip().lower()
    if value in _NAMED_COLORS:
        return _NAMED_COLORS[value]

    match = _HEX_RE.match(value)
    if match:
        digits = match.group(1)
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits[:3])
        return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)

    match = _RGB_RE.match(value)
    if match:
        parts = [part for part in re.split(r"[\s,/]+", match.group(1)) if part]
        if len(parts) < 3:
            return None
        channels = []
        for part in parts[:3]:
            try:
                if part.endswith("%"):
                    channels.append(round(float(part[:-1]) * 2.55))
                else:
                    channels.append(round(float(part)))
            except ValueError:
                return None
        return tuple(max(0, min(255, channel)) for channel in channels)  # type: ignore[return-value]
    return None


def luminance(color: str) -> Optional[float]:
    rgb = parse_rgb(color)
    if rgb is None:
        return None
    red, green, blue = rgb
    return (0.299 * red + 0.587 * green + 0.114 * blue) / 255


def is_dark(color: str) -> bool:
    """Classify a colour as dark when its luminance is below 0.5.

    Unparseable colours are treated as light.
    """
    value = luminance(color)
    return value is not None and value < LUMINANCE_DARK_THRESHOLD


def default_colors(dark: bool) -> ThemeColors:
    background, foreground = DEFAULT_DARK_COLORS if dark else DEFAULT_LIGHT_COLORS
    return ThemeColors(background=background, foreground=foreground)


def _style_rules(rules: Iterable[ast.Node]) -> Iterator[tuple[list[str], dict[str, str]]]:
    """Yield (selectors, declarations) for every style rule, including nested ones."""
    for rule in rules:
        if isinstance(rule, ast.QualifiedRule):
            prelude = [token for token in rule.prelude if not isinstance(token, ast.Comment)]
            selectors = [name.strip() for name in tinycss2.serialize(prelude).split(",")]
            declarations = {
                node.lower_name: tinycss2.serialize(node.value).strip()
                for node in tinycss2.parse_blocks_contents(rule.content, skip_comments=True, skip_whitespace=True)
                if isinstance(node, ast.Declaration)
            }
            yield selectors, declarations
        elif (
            isinstance(rule, ast.AtRule)
            and rule.content is not None
            and rule.lower_at_keyword in _GROUPING_AT_KEYWORDS
        ):
            nested = tinycss2.parse_rule_list(rule.content, skip_comments=True, skip_whitespace=True)
            yield from _style_rules(nested)


def parse_colors_from_css(
    css: str, selectors: Iterable[str] = DEFAULT_COLOR_SELECTORS
) -> Optional[ThemeColors]:
    """Extract a code block's background and foreground from theme CSS.

    The first rule whose selector list names one of ``selectors`` and that
    declares a background is used. Later matching rules may fill in a
    missing foreground.

    Args:
        css: Theme stylesheet text
        selectors: Candidate selectors in priority order

    Returns:
        ThemeColors, or None when no background could be found
    """
    if not css:
        return None
    wanted = list(selectors)
    best: Optional[tuple[int, dict[str, str]]] = None
    foreground: Optional[str] = None
    rules = tinycss2.parse_stylesheet(css, skip_comments=True, skip_whitespace=True)
    for names, declarations in _style_rules(rules):
        ranks = [wanted.index(name) for name in names if name in wanted]
        if not ranks:
            continue
        background = declarations.get("background-color") or declarations.get("background")
        if background and (best is None or min(ranks) < best[0]):
            best = (min(ranks), declarations)
        if foreground is None and declarations.get("color"):
            foreground = declarations["color"]

    if best is None:
        return None
    declarations = best[1]
    background = _first_color(declarations.get("background-color") or declarations["background"])
    if background is None:
        return None
    fg = _first_color(declarations.get("color") or foreground or "")
    if fg is None:
        fg = default_colors(is_dark(background)).foreground
    return ThemeColors(background=background, foreground=fg)


def _first_color(value: str) -> Optional[str]:
    for token in _COLOR_TOKEN_RE.findall(value):
        if parse_rgb(token) is not None:
            return token
    return None
