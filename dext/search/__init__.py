"""
Search package - Query routing, fuzzy scoring and result ranking.

A phrase is routed to keyword-matched (or core) plugins, their results are
gathered concurrently, then scored, filtered and capped.
"""

from .aggregator import QueryEngine, ResultAggregator
from .router import Mode, Query, QueryRouter, ResultItem, Route
from .scorer import score

__all__ = [
    "Mode",
    "Query",
    "QueryEngine",
    "QueryRouter",
    "ResultAggregator",
    "ResultItem",
    "Route",
    "score",
]
