"""
Detail Resolver - Rich content for one selected result item.

The cache is checked first; on a miss the originating plugin renders the
content, which is stored before it is returned. Concurrent requests for
the same uncached item share one plugin call.
"""

import asyncio

from loguru import logger

from dext.errors import UnknownPluginError
from dext.plugins.providers import PluginProviders
from dext.search.router import ResultItem
from dext.services.cache import DetailCache, cache_namespace


class DetailResolver:
    """Cache-first item detail lookup."""

    def __init__(self, providers: PluginProviders, cache: DetailCache):
        self.providers = providers
        self.cache = cache
        self._in_flight: dict[tuple[str, str], asyncio.Future] = {}

    async def resolve(self, item: ResultItem) -> str:
        """
        Return detail content for `item`.

        Args:
            item: A result item carrying its originating plugin descriptor

        Returns:
            The cached content when present, otherwise freshly rendered
            content (which is then cached).

        Raises:
            UnknownPluginError: if the item has no registered plugin
        """
        if item.plugin is None:
            raise UnknownPluginError(f"Item '{item.title}' has no originating plugin")

        namespace = self.cache.namespace(cache_namespace(item.plugin.path))
        key = item.cache_key()

        if namespace.has(key):
            logger.debug(f"Detail cache hit for '{item.title}' in {namespace.name}")
            return namespace.get(key)

        flight_key = (namespace.name, key)
        task = self._in_flight.get(flight_key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(item, namespace, key))
            self._in_flight[flight_key] = task
            task.add_done_callback(lambda done: self._landed(flight_key, done))

        # Cancelling one caller leaves the shared fetch running for the others
        return await asyncio.shield(task)

    async def _fetch(self, item: ResultItem, namespace, key: str) -> str:
        entry = self.providers.entry(item.plugin)
        content = await self.providers.retrieve_item_details(item, entry)
        namespace.set(key, content)
        return content

    def _landed(self, flight_key: tuple[str, str], task: asyncio.Future) -> None:
        self._in_flight.pop(flight_key, None)
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Detail fetch failed for {flight_key[0]}: {task.exception()!r}")
