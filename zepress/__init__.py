"""Markdown to WeChat-compatible HTML conversion."""

from .core import RenderResult, Settings, ZepressError, apply_completed_renders
from .pipeline import Pipeline, create_pipeline
from .utils.logging import setup_logging

__version__ = "0.1.0"

__all__ = [
    "Pipeline",
    "RenderResult",
    "Settings",
    "ZepressError",
    "apply_completed_renders",
    "create_pipeline",
    "setup_logging",
]
