"""Plugin system for the content pipeline."""

from .base import BasePlugin, PluginCategory, PluginDescriptor, PostProcessingPlugin, StructuralPlugin
from .manager import PluginExecutionContext, PluginManager
from .registry import PluginRegistry

__all__ = [
    "BasePlugin",
    "PluginCategory",
    "PluginDescriptor",
    "PostProcessingPlugin",
    "StructuralPlugin",
    "PluginExecutionContext",
    "PluginManager",
    "PluginRegistry",
]
