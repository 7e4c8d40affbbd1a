"""
Plugin providers - The calls the engine makes into plugins.

Each provider call runs one plugin capability, awaits it when it returns
an awaitable, coerces plain mappings into ResultItem and stamps the
originating descriptor onto every item. One malformed item is dropped
without failing the rest of the batch.
"""

import inspect
from typing import Any

from loguru import logger

from dext.errors import MalformedItemError, UnknownPluginError
from dext.plugins.base import PluginDescriptor
from dext.plugins.registry import PluginEntry, PluginRegistry
from dext.search.router import ResultItem


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class PluginProviders:
    """query_results / query_helper / retrieve_item_details over a registry."""

    def __init__(self, registry: PluginRegistry):
        self.registry = registry

    def entry(self, descriptor: PluginDescriptor) -> PluginEntry:
        entry = self.registry.get(descriptor.path)
        if entry is None:
            raise UnknownPluginError(f"Plugin not loaded: {descriptor.path}")
        return entry

    async def query_results(self, descriptor: PluginDescriptor, args) -> list[ResultItem]:
        entry = self.entry(descriptor)
        raw = await _resolve(entry.plugin.query(list(args)))
        return self._coerce(raw, entry.descriptor)

    async def query_helper(self, descriptor: PluginDescriptor, keyword: str) -> list[ResultItem]:
        entry = self.entry(descriptor)
        raw = await _resolve(entry.plugin.helper(keyword))
        return self._coerce(raw, entry.descriptor)

    async def retrieve_item_details(self, item: ResultItem, entry: PluginEntry) -> str:
        content = await _resolve(entry.plugin.details(item))
        return "" if content is None else str(content)

    def _coerce(self, raw, descriptor: PluginDescriptor) -> list[ResultItem]:
        items = []
        for obj in raw or []:
            if isinstance(obj, ResultItem):
                if not isinstance(obj.title, str):
                    logger.warning(f"Dropping item without title from {descriptor.name}")
                    continue
                obj.plugin = descriptor
                items.append(obj)
            elif isinstance(obj, dict):
                try:
                    items.append(ResultItem.from_dict(obj, plugin=descriptor))
                except MalformedItemError as e:
                    logger.warning(f"Dropping malformed item from {descriptor.name}: {e}")
            else:
                logger.warning(f"Dropping unsupported item {type(obj).__name__} from {descriptor.name}")
        return items
