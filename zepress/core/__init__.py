"""Settings, errors and render context shared by the pipeline."""

from .config import Settings
from .context import PendingRender, RenderContext, RenderQueue, RenderResult, apply_completed_renders
from .exceptions import (
    ConfigurationError,
    CssResolutionError,
    HighlightError,
    PluginExecutionError,
    RenderError,
    ZepressError,
)

__all__ = [
    "ConfigurationError",
    "CssResolutionError",
    "HighlightError",
    "PendingRender",
    "PluginExecutionError",
    "RenderContext",
    "RenderError",
    "RenderQueue",
    "RenderResult",
    "Settings",
    "ZepressError",
    "apply_completed_renders",
]
