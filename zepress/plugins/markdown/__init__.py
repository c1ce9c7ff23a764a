"""Structural plugins hooking the Markdown renderer."""

from .callouts import Callouts
from .code_highlight import CodeHighlight
from .code_renderer import CodeRenderer
from .embeds import Embeds
from .footnotes import Footnotes
from .links import Links
from .math import Math
from .text_highlight import TextHighlight

__all__ = [
    "Callouts",
    "CodeHighlight",
    "CodeRenderer",
    "Embeds",
    "Footnotes",
    "Links",
    "Math",
    "TextHighlight",
]
