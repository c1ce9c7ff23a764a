"""Highlight-style name to theme descriptor resolution."""

import threading
from typing import Optional

import structlog

from ..assets.catalogue import AssetCatalogue, PygmentsAssetCatalogue, ThemeDescriptor
from ..constants import DARK_THEME_KEYWORDS, DEFAULT_DARK_THEME, DEFAULT_LIGHT_THEME, THEME_ALIASES
from ..css.colors import parse_colors_from_css

logger = structlog.get_logger(__name__)


def display_name(name: str) -> str:
    """Turn a kebab-case style name into a Title Case label."""
    return " ".join(part.capitalize() for part in name.replace("_", "-").split("-") if part)


class ThemeResolver:
    """Map a configured highlight-style name to a concrete theme.

    Resolution order:

    1. exact match in the custom theme registry;
    2. exact match in the asset catalogue, after applying the alias table;
    3. keyword inference (``dark``, ``night``, ``black``) to the dark default;
    4. the light default.

    The result depends only on the name and the registered custom themes,
    so results are memoised per name and the memo is cleared whenever the
    registry changes.
    """

    def __init__(self, catalogue: Optional[AssetCatalogue] = None):
        self.catalogue = catalogue or PygmentsAssetCatalogue()
        self._builtin = PygmentsAssetCatalogue()
        self._custom: dict[str, ThemeDescriptor] = {}
        self._cache: dict[str, ThemeDescriptor] = {}
        self._lock = threading.Lock()

    def register_custom_theme(
        self,
        name: str,
        css_text: str,
        is_dark: Optional[bool] = None,
        style: Optional[str] = None,
    ) -> ThemeDescriptor:
        """Register a user-supplied theme.

        Args:
            name: Theme name, matched exactly
            css_text: Theme stylesheet
            is_dark: Classification; derived from the stylesheet background if omitted
            style: Pygments style used to colour tokens

        Returns:
            The registered descriptor
        """
        if is_dark is None:
            colors = parse_colors_from_css(css_text)
            is_dark = colors.is_dark if colors else False
        descriptor = ThemeDescriptor(
            name=name,
            css_text=css_text,
            is_dark=is_dark,
            style=style or (DEFAULT_DARK_THEME if is_dark else DEFAULT_LIGHT_THEME),
        )
        with self._lock:
            self._custom[name] = descriptor
            self._cache.clear()
        logger.debug("Registered custom theme", theme=name, dark=is_dark)
        return descriptor

    def custom_theme_names(self) -> list[str]:
        return list(self._custom)

    def theme_names(self) -> list[str]:
        """List selectable theme names: custom themes, then catalogue styles."""
        names = list(self._custom)
        list_styles = getattr(self.catalogue, "list_highlight_styles", None)
        catalogue_names = list_styles() if callable(list_styles) else self._builtin.list_highlight_styles()
        names.extend(name for name in catalogue_names if name not in names)
        return names

    def resolve(self, name: Optional[str]) -> ThemeDescriptor:
        """Resolve a theme name; never raises.

        Args:
            name: Configured highlight-style name (may be empty)

        Returns:
            Theme descriptor
        """
        key = (name or "").strip()
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        descriptor = self._resolve_uncached(key)
        with self._lock:
            self._cache[key] = descriptor
        return descriptor

    def _resolve_uncached(self, key: str) -> ThemeDescriptor:
        if key in self._custom:
            return self._custom[key]

        if key:
            candidate = THEME_ALIASES.get(key.lower(), key)
            descriptor = self._lookup(candidate)
            if descriptor is not None:
                return descriptor

        lowered = key.lower()
        if any(keyword in lowered for keyword in DARK_THEME_KEYWORDS):
            logger.debug("Inferred dark theme from name", theme=key)
            return self._default(dark=True)

        if key:
            logger.debug("Unknown theme, using light default", theme=key)
        return self._default(dark=False)

    def _lookup(self, name: str) -> Optional[ThemeDescriptor]:
        try:
            return self.catalogue.lookup_theme(name)
        except Exception as e:
            logger.warning("Theme lookup failed", theme=name, error=str(e))
            return None

    def _default(self, dark: bool) -> ThemeDescriptor:
        name = DEFAULT_DARK_THEME if dark else DEFAULT_LIGHT_THEME
        descriptor = self._lookup(name) or self._builtin.lookup_theme(name)
        if descriptor is None:
            # Pygments too old to ship the dark default
            descriptor = ThemeDescriptor(name=name, css_text="", is_dark=dark, style="native" if dark else "default")
        return descriptor
