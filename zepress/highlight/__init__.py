"""Syntax highlighting and theme resolution."""

from .highlighter import HighlightResult, Highlighter, HighlighterCache, extract_code_markup
from .themes import ThemeResolver

__all__ = ["HighlightResult", "Highlighter", "HighlighterCache", "ThemeResolver", "extract_code_markup"]
