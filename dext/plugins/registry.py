"""
Plugin Registry - The resolved, read-only table of loaded plugins.

Built-in core plugins live in dext.plugins.core and are enabled by name.
User plugins are named "module:Class" in settings and imported once, at
startup. Nothing is imported at query time.
"""

import importlib
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

from loguru import logger

from dext.errors import PluginLoadError
from dext.plugins.base import Plugin, PluginDescriptor

CORE_PACKAGE = "dext.plugins.core"


@dataclass(frozen=True)
class PluginEntry:
    """A descriptor paired with its plugin implementation."""
    descriptor: PluginDescriptor
    plugin: Plugin


class PluginRegistry:
    """Immutable, ordered collection of plugin entries keyed by path."""

    def __init__(self, entries=()):
        self._entries: tuple[PluginEntry, ...] = tuple(entries)
        self._by_path = {e.descriptor.path: e for e in self._entries}

    def __iter__(self) -> Iterator[PluginEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def descriptors(self) -> tuple[PluginDescriptor, ...]:
        return tuple(e.descriptor for e in self._entries)

    def get(self, path: str) -> Optional[PluginEntry]:
        return self._by_path.get(path)


def describe(plugin: Plugin, path: str, is_core: bool) -> PluginDescriptor:
    """Build the descriptor for a plugin instance."""
    return PluginDescriptor(
        path=path,
        name=plugin.name or path.rsplit(".", 1)[-1],
        is_core=is_core,
        keyword=plugin.keyword or None,
        schema=plugin.schema,
        action=plugin.action,
    )


def load_plugins(settings: Dict[str, Any]) -> PluginRegistry:
    """
    Instantiate core and user plugins named in settings.

    Args:
        settings: Full settings dictionary (see utils.helpers.load_settings)

    Returns:
        PluginRegistry with core plugins first, then user plugins.
        Plugins that fail to load are logged and skipped.
    """
    plugin_settings = settings.get("plugins", {})
    entries = []

    for name in plugin_settings.get("core", []):
        path = f"{CORE_PACKAGE}.{name}"
        try:
            plugin = _instantiate(path, "PLUGIN_CLASS", settings)
        except PluginLoadError:
            logger.exception(f"Failed to load core plugin '{name}'")
            continue
        entries.append(PluginEntry(describe(plugin, path, is_core=True), plugin))

    for spec in plugin_settings.get("user", []):
        module_name, _, class_name = spec.partition(":")
        try:
            plugin = _instantiate(module_name, class_name, settings)
        except PluginLoadError:
            logger.exception(f"Failed to load user plugin '{spec}'")
            continue
        entries.append(PluginEntry(describe(plugin, spec, is_core=False), plugin))

    logger.debug(f"Loaded {len(entries)} plugins: {[e.descriptor.name for e in entries]}")
    return PluginRegistry(entries)


def _instantiate(module_name: str, attr: str, settings: Dict[str, Any]) -> Plugin:
    """Import `module_name`, resolve `attr` to a Plugin class and build it."""
    try:
        module = importlib.import_module(module_name)
        cls = getattr(module, attr or "PLUGIN_CLASS")
    except (ImportError, AttributeError) as e:
        raise PluginLoadError(f"Cannot import {module_name}:{attr}: {e}") from e

    if not (isinstance(cls, type) and issubclass(cls, Plugin)):
        raise PluginLoadError(f"{module_name}:{attr} is not a Plugin subclass")

    try:
        return cls.from_settings(settings) if hasattr(cls, "from_settings") else cls()
    except Exception as e:
        raise PluginLoadError(f"Cannot instantiate {module_name}:{attr}: {e}") from e
