"""Per-call settings consumed by the pipeline and its plugins."""

import re
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

import structlog

from ..constants import (
    DEFAULT_EMBED_STYLE,
    DEFAULT_HIGHLIGHT,
    DEFAULT_LINK_FOOTNOTE_MODE,
    DEFAULT_MATH,
    DEFAULT_THEME_COLOR,
    EMBED_STYLES,
    LINK_FOOTNOTE_MODES,
    TARGET_PREVIEW,
    TARGET_WECHAT,
)

logger = structlog.get_logger(__name__)

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

# Host-side names that do not follow the plain camelCase mapping
_ALIASES = {
    "LinkFootnoteMode": "link_footnote_mode",
    "enableWeixinCodeFormat": "enable_weixin_code_format",
}


@dataclass(frozen=True)
class Settings:
    """Read-only view of the user preferences for a single transformation.

    The preference fields typed ``Optional[bool]`` are document-level
    overrides: ``None`` leaves the decision to the owning plugin's config.
    """

    default_highlight: str = DEFAULT_HIGHLIGHT
    target: str = TARGET_PREVIEW
    enable_weixin_code_format: bool = False

    enable_heading_number: Optional[bool] = None
    enable_heading_delimiter_break: Optional[bool] = None
    show_image_caption: Optional[bool] = None

    theme_color: str = DEFAULT_THEME_COLOR
    enable_theme_color: bool = False

    link_footnote_mode: str = DEFAULT_LINK_FOOTNOTE_MODE
    embed_style: str = DEFAULT_EMBED_STYLE
    math: str = DEFAULT_MATH
    asset_base_url: str = ""

    @property
    def requires_css_variable_resolution(self) -> bool:
        """Whether the output target cannot evaluate CSS custom properties."""
        return self.target == TARGET_WECHAT or self.enable_weixin_code_format

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], base: Optional["Settings"] = None) -> "Settings":
        """Build settings from a plain mapping.

        Keys may be given in snake_case or in the host's camelCase form.
        Unknown keys and invalid enum values are ignored.

        Args:
            data: Raw preference values
            base: Settings to extend (defaults to built-in defaults)

        Returns:
            Settings instance
        """
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = _ALIASES.get(key) or _CAMEL_RE.sub("_", key).lower()
            if name not in known:
                logger.debug("Ignoring unknown setting", key=key)
                continue
            values[name] = value

        if values.get("link_footnote_mode") not in (None, *LINK_FOOTNOTE_MODES):
            logger.warning("Invalid link footnote mode", value=values["link_footnote_mode"])
            values.pop("link_footnote_mode")
        if values.get("embed_style") not in (None, *EMBED_STYLES):
            logger.warning("Invalid embed style", value=values["embed_style"])
            values.pop("embed_style")

        merged = {f.name: getattr(base or cls(), f.name) for f in fields(cls)}
        merged.update(values)
        return cls(**merged)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
