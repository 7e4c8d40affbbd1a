"""
Plugins package - Capability interface, registry and providers.

Built-in core plugins live in the core sub-package.
"""

from .base import Plugin, PluginDescriptor
from .providers import PluginProviders
from .registry import PluginEntry, PluginRegistry, load_plugins

__all__ = [
    "Plugin",
    "PluginDescriptor",
    "PluginEntry",
    "PluginProviders",
    "PluginRegistry",
    "load_plugins",
]
