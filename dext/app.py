"""
Dext application context.

DextApp owns everything one running engine needs: settings, the plugin
registry, the detail cache, router, aggregator, resolver, debouncers and
the message channel. Nothing lives in module globals; create() builds a
context and close() tears it down.

Usage:
    app = DextApp.create()
    await app.channel.dispatch(IPC_QUERY_COMMAND, {"phrase": "calc 2+2"}, sender)
    ...
    await app.close()
"""

from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from dext import actions
from dext.constants import (
    IPC_COPY_CURRENT_ITEM,
    IPC_EXECUTE_ITEM,
    IPC_ITEM_DETAILS_REQUEST,
    IPC_ITEM_DETAILS_RESPONSE,
    IPC_QUERY_COMMAND,
    IPC_QUERY_RESULTS,
)
from dext.ipc import MessageChannel, Request
from dext.plugins.providers import PluginProviders
from dext.plugins.registry import PluginRegistry, load_plugins
from dext.search.aggregator import QueryEngine, ResultAggregator
from dext.search.router import QueryRouter, ResultItem
from dext.services.cache import DetailCache
from dext.services.details import DetailResolver
from dext.utils.debounce import Debouncer
from dext.utils.helpers import load_settings


def _as_item(payload: Any) -> ResultItem:
    if isinstance(payload, ResultItem):
        return payload
    return ResultItem.from_dict(payload)


class DextApp:
    """One engine instance and its lifecycle."""

    def __init__(
        self,
        settings: Dict[str, Any],
        registry: PluginRegistry,
        cache: DetailCache,
    ):
        self.settings = settings
        self.registry = registry
        self.cache = cache

        search = settings["search"]
        self.providers = PluginProviders(registry)
        self.router = QueryRouter(registry.descriptors)
        self.aggregator = ResultAggregator(
            self.providers,
            max_results=search["max_results"],
            threshold=search["relevance_threshold"],
            isolate_failures=search["isolate_failures"],
        )
        self.engine = QueryEngine(self.router, self.aggregator)
        self.resolver = DetailResolver(self.providers, cache)
        self.drop_stale_results = search["drop_stale_results"]

        wait = search["debounce_ms"] / 1000
        self._debounced_query = Debouncer(self._handle_query, wait)
        self._debounced_details = Debouncer(self._handle_item_details, wait)
        self._debounced_copy = Debouncer(self._handle_copy, wait)
        self._generation = 0

        self.channel = MessageChannel()
        self._register_handlers()

    @classmethod
    def create(
        cls,
        settings: Optional[Dict[str, Any]] = None,
        registry: Optional[PluginRegistry] = None,
        cache: Optional[DetailCache] = None,
        config_path: Optional[Path] = None,
    ) -> "DextApp":
        """Build a context from settings, loading plugins and opening the cache."""
        settings = settings or load_settings(config_path)
        registry = registry if registry is not None else load_plugins(settings)
        cache = cache or DetailCache(Path(settings["cache"]["path"]).expanduser())
        logger.debug(f"Dext ready with {len(registry)} plugins")
        return cls(settings, registry, cache)

    @property
    def _debouncers(self) -> tuple[Debouncer, ...]:
        return (self._debounced_query, self._debounced_details, self._debounced_copy)

    async def flush(self) -> None:
        """Fire pending debounced calls now and wait for them to finish."""
        for debouncer in self._debouncers:
            debouncer.flush()
        for debouncer in self._debouncers:
            await debouncer.drain()

    async def close(self) -> None:
        """Unregister channel handlers and settle debounced calls before closing the cache."""
        for kind in self.channel.kinds:
            self.channel.off(kind)
        for debouncer in self._debouncers:
            debouncer.cancel()
            await debouncer.drain()
        self.cache.close()

    def _register_handlers(self) -> None:
        self.channel.on(IPC_QUERY_COMMAND, self._debounced_query)
        self.channel.on(IPC_ITEM_DETAILS_REQUEST, self._debounced_details)
        self.channel.on(IPC_EXECUTE_ITEM, self._handle_execute)
        self.channel.on(IPC_COPY_CURRENT_ITEM, self._debounced_copy)

    async def query(self, phrase: str) -> list[ResultItem]:
        """Run one ranked query without debouncing."""
        return await self.engine.query(phrase)

    async def details(self, item: ResultItem) -> str:
        """Resolve detail content without debouncing."""
        return await self.resolver.resolve(item)

    async def _handle_query(self, request: Request) -> None:
        """
        Run a query and reply with the ranked results.

        A failure sends no reply, so whatever the front end shows stays.
        Results for a query that has since been superseded are dropped.
        """
        self._generation += 1
        generation = self._generation
        phrase = request.payload.get("phrase", "")

        try:
            results = await self.engine.query(phrase)
        except Exception:
            logger.exception(f"Query failed for '{phrase}'")
            return

        if self.drop_stale_results and generation != self._generation:
            logger.debug(f"Dropping stale results for '{phrase}' (generation {generation})")
            return

        request.reply(IPC_QUERY_RESULTS, [item.to_dict() for item in results or []])

    async def _handle_item_details(self, request: Request) -> None:
        try:
            item = _as_item(request.payload)
            content = await self.resolver.resolve(item)
        except Exception:
            logger.exception("Item detail request failed")
            return

        request.reply(IPC_ITEM_DETAILS_RESPONSE, content)

    def _handle_execute(self, request: Request) -> None:
        message = request.payload
        if not isinstance(message, actions.ExecuteMessage):
            message = actions.ExecuteMessage.from_dict(message)
        actions.execute(message)

    def _handle_copy(self, request: Request) -> None:
        actions.copy_item(_as_item(request.payload))
