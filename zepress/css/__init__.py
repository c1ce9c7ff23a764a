"""CSS normalization passes for inline-only targets."""

from .inline import BASE_INLINE_CSS, inline_stylesheet
from .variables import (
    CssVariableResolver,
    document_definitions,
    resolve_css_variables,
    resolve_inline_styles,
    resolve_style_blocks,
)

__all__ = [
    "BASE_INLINE_CSS",
    "CssVariableResolver",
    "document_definitions",
    "inline_stylesheet",
    "resolve_css_variables",
    "resolve_inline_styles",
    "resolve_style_blocks",
]
