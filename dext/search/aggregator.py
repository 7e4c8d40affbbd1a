"""
Result Aggregator - Fans a routed query out to plugins and ranks the merge.

Pipeline for one query:
  1. One provider call per route, all awaited together
  2. Flatten in route order (each plugin's own order is kept)
  3. Score every title against the keyword
  4. Stable sort by score, descending
  5. Keep items scoring exactly 0 (no signal) or above the threshold
  6. Cap at max_results
"""

import asyncio
from typing import Callable, Optional, Protocol

from loguru import logger

from dext import constants
from dext.plugins.base import PluginDescriptor
from dext.search.router import Mode, Query, QueryRouter, ResultItem, Route
from dext.search.scorer import score


class Providers(Protocol):
    async def query_results(self, descriptor: PluginDescriptor, args) -> list[ResultItem]: ...

    async def query_helper(self, descriptor: PluginDescriptor, keyword: str) -> list[ResultItem]: ...


class ResultAggregator:
    """Concurrent fan-out plus fuzzy ranking."""

    def __init__(
        self,
        providers: Providers,
        scorer: Callable[[Optional[str], Optional[str]], float] = score,
        max_results: int = constants.MAX_RESULTS,
        threshold: float = constants.RELEVANCE_THRESHOLD,
        isolate_failures: bool = False,
    ):
        self.providers = providers
        self.scorer = scorer
        self.max_results = max_results
        self.threshold = threshold
        self.isolate_failures = isolate_failures

    async def aggregate(self, routes: list[Route], keyword: str) -> list[ResultItem]:
        """
        Query every routed plugin and return the ranked, bounded result list.

        Args:
            routes: Routing decisions from QueryRouter.route()
            keyword: First token of the phrase, used for scoring

        Returns:
            Ranked items, never None. Empty when routes is empty.

        Raises:
            Whatever a provider raised, unless isolate_failures is set.
        """
        if not routes:
            return []

        result_sets = await asyncio.gather(*(self._call(r, keyword) for r in routes))
        items = [item for result_set in result_sets for item in result_set]

        return self.rank(items, keyword)

    def rank(self, items: list[ResultItem], keyword: str) -> list[ResultItem]:
        """Score, sort, filter and truncate an already merged item list."""
        scored = []
        for item in items:
            if not isinstance(getattr(item, "title", None), str):
                logger.warning(f"Dropping unrankable item: {item!r:.80}")
                continue
            scored.append((self.scorer(item.title, keyword), item))

        # list.sort is stable, equal scores keep input order
        scored.sort(key=lambda pair: pair[0], reverse=True)

        kept = [item for s, item in scored if s == 0 or s > self.threshold]
        return kept[:self.max_results]

    async def _call(self, route: Route, keyword: str) -> list[ResultItem]:
        if route.mode is Mode.HELPER:
            call = self.providers.query_helper(route.plugin, keyword)
        else:
            call = self.providers.query_results(route.plugin, route.args)

        if not self.isolate_failures:
            return await call

        try:
            return await call
        except Exception:
            logger.exception(f"Plugin '{route.plugin.name}' failed, ignoring its results")
            return []


class QueryEngine:
    """Parse, route and aggregate in one call."""

    def __init__(self, router: QueryRouter, aggregator: ResultAggregator):
        self.router = router
        self.aggregator = aggregator

    async def query(self, phrase: str) -> list[ResultItem]:
        query = Query.parse(phrase)
        routes = self.router.route(query)
        return await self.aggregator.aggregate(routes, query.keyword)
