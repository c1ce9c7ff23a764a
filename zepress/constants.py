"""Centralized constants for the zepress content pipeline.

Defaults that a deployment may want to change can be overridden through
``ZEPRESS_*`` environment variables; everything else is a fixed part of the
rendering contract.
"""

from os import environ

# Targets
TARGET_PREVIEW: str = "preview"
TARGET_WECHAT: str = "wechat"

# Settings defaults
DEFAULT_HIGHLIGHT: str = environ.get("ZEPRESS_DEFAULT_HIGHLIGHT", "default")
DEFAULT_THEME_COLOR: str = environ.get("ZEPRESS_THEME_COLOR", "#7852ee")
DEFAULT_LINK_FOOTNOTE_MODE: str = "non-wx"
DEFAULT_EMBED_STYLE: str = "quote"
DEFAULT_MATH: str = "latex"

LINK_FOOTNOTE_MODES: tuple[str, ...] = ("none", "all", "non-wx")
EMBED_STYLES: tuple[str, ...] = ("quote", "content")
WECHAT_LINK_HOST: str = "mp.weixin.qq.com"

# Themes
DEFAULT_LIGHT_THEME: str = "default"
DEFAULT_DARK_THEME: str = "github-dark"
DARK_THEME_KEYWORDS: tuple[str, ...] = ("dark", "night", "black")
THEME_ALIASES: dict[str, str] = {
    "默认": "default",
    "default": "default",
    "github": "default",
    "github-light": "default",
    "github-dark": "github-dark",
    "vs": "vs",
    "vs2015": "native",
    "monokai": "monokai",
    "nord": "nord",
    "tokyo-night-dark": "one-dark",
}

# Colour classification
LUMINANCE_DARK_THRESHOLD: float = 0.5
DEFAULT_DARK_COLORS: tuple[str, str] = ("#2d2d2d", "#d8dee9")
DEFAULT_LIGHT_COLORS: tuple[str, str] = ("#f6f6f6", "#2e3440")

# Code blocks
PLAIN_LANGUAGE: str = "text"
HIGHLIGHT_STYLE_INHERIT: str = "inherit"
HIGHLIGHT_STYLE_NONE: str = "none"
CODE_WINDOW_CLASS: str = "mac-code-window"
CODE_WINDOW_STYLE_ID: str = "zp-code-window-styles"
CODE_LANGUAGE_LABEL_CLASS: str = "mac-code-language-label"
LINE_NUMBER_CLASS: str = "line-number"
LABEL_COLOR_LIGHT: str = "#666"
LABEL_COLOR_DARK: str = "#a0a0a0"
LINE_NUMBER_COLOR_LIGHT: str = "#999"
LINE_NUMBER_COLOR_DARK: str = "#6e7681"
CODE_BORDER: str = "1px solid rgba(200, 100, 66, 0.2)"

# Fence markers, checked in this order by the code renderer
MATH_FENCE_LANGUAGES: dict[str, str] = {
    "latex": "latex",
    "tex": "latex",
    "am": "asciimath",
    "asciimath": "asciimath",
}
MERMAID_FENCE: str = "mermaid"
CARD_FENCE: str = "mpcard"
ADMONITION_FENCE_PREFIX: str = "ad-"

# Images
DEFAULT_IMAGE_STYLE: str = "max-width: 100%; height: auto;"
IMAGE_WRAPPER_CLASS: str = "zp-image-wrapper"
IMAGE_CAPTION_CLASS: str = "zp-image-caption"
IMAGE_EXTENSIONS: frozenset[str] = frozenset(
    {"png", "jpg", "jpeg", "gif", "bmp", "svg", "webp"}
)

# Headings
HEADING_NUMBER_CLASS: str = "zp-heading-number"
DEFAULT_HEADING_DELIMITERS: str = ",，、；：;:|"

# CSS
ROOT_SELECTORS: frozenset[str] = frozenset({":root", "html", "body"})
INLINE_WRAPPER_SELECTOR: str = ".zp-inline"
MAX_VAR_DEPTH: int = 16

# Logging
LOG_LEVEL: str = environ.get("ZEPRESS_LOG_LEVEL", "INFO")
LOG_JSON: bool = environ.get("ZEPRESS_LOG_JSON", "").lower() in ("1", "true", "yes")
