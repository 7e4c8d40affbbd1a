"""
Query Router - Selects which plugins answer a phrase, and how.

The first whitespace token of the phrase is the keyword. Plugins that
declare no keyword are always on; plugins that declare one only answer
when the keyword matches. A keyword plugin with nothing typed after its
keyword is asked for helper (usage) items instead of results. When no
plugin matches at all, the whole phrase goes to the core plugins.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional

from loguru import logger

from dext.errors import MalformedItemError
from dext.plugins.base import PluginDescriptor

_ITEM_FIELDS = ("title", "subtitle", "arg", "icon", "mods", "text")


@dataclass
class ResultItem:
    """A single result from any plugin."""
    title: str
    subtitle: str = ""
    arg: Any = None
    icon: Optional[str] = None
    mods: dict = field(default_factory=dict)  # {"cmd": {"arg": ...}, "alt": {...}}
    text: dict = field(default_factory=dict)  # {"copy": ...}
    extra: dict = field(default_factory=dict)  # opaque plugin fields
    plugin: Optional[PluginDescriptor] = None

    @classmethod
    def from_dict(cls, data: dict, plugin: Optional[PluginDescriptor] = None) -> "ResultItem":
        """
        Build an item from a plain mapping.

        Unknown keys are kept in `extra`. A "plugin" key is honoured only
        when no descriptor is passed in.

        Raises:
            MalformedItemError: if the mapping has no string title
        """
        title = data.get("title")
        if not isinstance(title, str):
            raise MalformedItemError(f"Result item has no title: {data!r:.80}")

        if plugin is None and isinstance(data.get("plugin"), dict):
            plugin = PluginDescriptor(**data["plugin"])

        return cls(
            title=title,
            subtitle=data.get("subtitle") or "",
            arg=data.get("arg"),
            icon=data.get("icon"),
            mods=dict(data.get("mods") or {}),
            text=dict(data.get("text") or {}),
            extra={k: v for k, v in data.items() if k not in _ITEM_FIELDS and k != "plugin"},
            plugin=plugin,
        )

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        data.update({
            "title": self.title,
            "subtitle": self.subtitle,
            "arg": self.arg,
            "icon": self.icon,
            "mods": self.mods,
            "text": self.text,
            "plugin": self.plugin.to_dict() if self.plugin else None,
        })
        return data

    def cache_key(self) -> str:
        """Serialize the whole item with a stable key order."""
        return json.dumps(self.to_dict(), sort_keys=True, default=str)


@dataclass(frozen=True)
class Query:
    """A parsed input phrase."""
    phrase: str
    fractions: tuple[str, ...]
    keyword: str
    args: tuple[str, ...]
    query_string: str

    @classmethod
    def parse(cls, phrase: str) -> "Query":
        fractions = tuple(phrase.split(" "))
        keyword, args = fractions[0], fractions[1:]
        return cls(
            phrase=phrase,
            fractions=fractions,
            keyword=keyword,
            args=args,
            query_string=" ".join(args).strip(),
        )


class Mode(str, Enum):
    HELPER = "helper"
    RESULTS = "results"


@dataclass(frozen=True)
class Route:
    """One routing decision: ask `plugin` in `mode` with `args`."""
    plugin: PluginDescriptor
    mode: Mode
    args: tuple[str, ...]


class QueryRouter:
    """Routes parsed queries to plugin descriptors."""

    def __init__(self, plugins: Iterable[PluginDescriptor]):
        self._plugins: tuple[PluginDescriptor, ...] = tuple(plugins)

    @property
    def plugins(self) -> tuple[PluginDescriptor, ...]:
        return self._plugins

    def route(self, query: Query) -> list[Route]:
        """
        Decide which plugins take part in a query.

        Args:
            query: The parsed phrase

        Returns:
            Routes in registry order. Empty when nothing matches and no
            core plugin is loaded.
        """
        matched = [
            p for p in self._plugins
            if not p.keyword or p.keyword == query.keyword
        ]

        if matched:
            routes = [self._route_matched(p, query) for p in matched]
        else:
            # Unknown leading word: search core plugins with the full phrase
            routes = [
                Route(plugin=p, mode=Mode.RESULTS, args=query.fractions)
                for p in self._plugins
                if p.is_core
            ]

        logger.debug(
            f"Routed '{query.phrase}' to "
            f"{[(r.plugin.name, r.mode.value) for r in routes]}"
        )
        return routes

    def _route_matched(self, plugin: PluginDescriptor, query: Query) -> Route:
        if not plugin.keyword:
            return Route(plugin=plugin, mode=Mode.RESULTS, args=query.fractions)
        if not query.query_string:
            return Route(plugin=plugin, mode=Mode.HELPER, args=query.args)
        return Route(plugin=plugin, mode=Mode.RESULTS, args=query.args)
