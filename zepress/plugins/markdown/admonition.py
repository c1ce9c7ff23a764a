"""Admonition markup shared by callouts and ``ad-*`` fences.

Output is fully inline-styled so it survives targets without stylesheets.
"""

import html

from ...css.colors import parse_rgb

# type -> (variant, colour, icon)
_VARIANTS = {
    "note": ("note", "#448aff", "✎"),
    "abstract": ("abstract", "#00b0ff", "☰"),
    "summary": ("abstract", "#00b0ff", "☰"),
    "tldr": ("abstract", "#00b0ff", "☰"),
    "info": ("info", "#00b8d4", "ℹ"),
    "todo": ("info", "#00b8d4", "☑"),
    "tip": ("tip", "#00bfa5", "✦"),
    "hint": ("tip", "#00bfa5", "✦"),
    "important": ("tip", "#00bfa5", "✦"),
    "success": ("success", "#00c853", "✔"),
    "check": ("success", "#00c853", "✔"),
    "done": ("success", "#00c853", "✔"),
    "question": ("question", "#64dd17", "?"),
    "help": ("question", "#64dd17", "?"),
    "faq": ("question", "#64dd17", "?"),
    "warning": ("warning", "#ff9100", "⚠"),
    "caution": ("warning", "#ff9100", "⚠"),
    "attention": ("warning", "#ff9100", "⚠"),
    "failure": ("failure", "#ff5252", "✘"),
    "fail": ("failure", "#ff5252", "✘"),
    "missing": ("failure", "#ff5252", "✘"),
    "danger": ("danger", "#ff1744", "⚡"),
    "error": ("danger", "#ff1744", "⚡"),
    "bug": ("bug", "#f50057", "✱"),
    "example": ("example", "#7c4dff", "☷"),
    "quote": ("quote", "#9e9e9e", "❝"),
    "cite": ("quote", "#9e9e9e", "❝"),
}


def variant_for(kind: str) -> tuple[str, str, str]:
    """Variant, colour and icon for an admonition type; unknown types look like notes."""
    return _VARIANTS.get(kind.lower(), _VARIANTS["note"])


def _tint(color: str, alpha: float) -> str:
    rgb = parse_rgb(color)
    if rgb is None:
        return "transparent"
    return f"rgba({rgb[0]}, {rgb[1]}, {rgb[2]}, {alpha})"


def default_title(kind: str) -> str:
    return kind.replace("-", " ").capitalize() if kind else "Note"


def admonition_open(kind: str, title: str) -> str:
    variant, color, icon = variant_for(kind)
    title = title or default_title(kind)
    return (
        f'<section data-component="admonition" data-type="{html.escape(kind.lower())}" '
        f'data-variant="{variant}" class="admonition admonition-{variant}" '
        f'style="margin: 1em 0; border-left: 4px solid {color}; border-radius: 6px; '
        f'background: {_tint(color, 0.1)}; overflow: hidden;">'
        f'<section class="admonition-header" style="display: flex; align-items: center; '
        f'padding: 8px 12px; font-weight: bold; color: {color}; background: {_tint(color, 0.1)};">'
        f'<span class="admonition-icon" style="display: inline-block; margin-right: 8px;">{icon}</span>'
        f'<span class="admonition-title">{html.escape(title)}</span>'
        "</section>"
        '<section class="admonition-content" style="padding: 8px 12px;">\n'
    )


def admonition_close() -> str:
    return "</section></section>\n"


def render_admonition(kind: str, title: str, body_html: str) -> str:
    return f"{admonition_open(kind, title)}{body_html}{admonition_close()}"
