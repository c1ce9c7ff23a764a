"""Theme and highlight-style lookups."""

from .catalogue import AssetCatalogue, HighlightStyle, PygmentsAssetCatalogue, ThemeDescriptor

__all__ = ["AssetCatalogue", "HighlightStyle", "PygmentsAssetCatalogue", "ThemeDescriptor"]
