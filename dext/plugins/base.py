"""
Plugin capability interface and descriptor.

Every plugin implements the same three capabilities, resolved once at
startup into the registry:

  query(args)      -> result items for a search
  helper(keyword)  -> usage/hint items when only the keyword was typed
  details(item)    -> rich content (markup) for one selected item

Any of them may be a coroutine function; callers await when needed.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class PluginDescriptor:
    """Immutable metadata for one loaded plugin."""
    path: str
    name: str
    is_core: bool = False
    keyword: Optional[str] = None
    schema: Optional[str] = None
    action: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class Plugin(ABC):
    """Base class for all plugins."""

    name: str = ""
    keyword: Optional[str] = None
    is_core: bool = False
    schema: Optional[str] = None
    action: Optional[str] = None

    @abstractmethod
    def query(self, args: list[str]):
        """Return result items for the query tokens."""
        ...

    def helper(self, keyword: str):
        """Return hint items shown when only the keyword has been typed."""
        return []

    def details(self, item) -> str:
        """Return detail content for one of this plugin's items."""
        return ""
