#!/usr/bin/env python3
"""Benchmark the Dext query pipeline.

Measures route + fan-out + rank latency with synthetic plugins of
increasing result counts, then the ranking pass alone, and prints a
markdown table.

Usage:
    python3 scripts/bench-ranking.py [RUNS]
    # Default runs: 50
"""

import asyncio
import math
import random
import string
import sys
import time

from dext.plugins.base import Plugin
from dext.plugins.providers import PluginProviders
from dext.plugins.registry import PluginEntry, PluginRegistry, describe
from dext.search.aggregator import QueryEngine, ResultAggregator
from dext.search.router import QueryRouter, ResultItem

RUNS = int(sys.argv[1]) if len(sys.argv) > 1 else 50
SIZES = [10, 100, 1000, 5000]
PHRASES = ["fire", "calc 2+2", "xyz hello world", "code"]

random.seed(1)


def log(line=""):
    print(line)


def stats(values):
    """Compute min, max, avg, median, p95, stddev from a list of floats."""
    s = sorted(values)
    n = len(s)
    avg = sum(s) / n
    variance = sum((x - avg) ** 2 for x in s) / n
    return {
        "min": s[0],
        "max": s[-1],
        "avg": avg,
        "median": s[n // 2] if n % 2 else (s[n // 2 - 1] + s[n // 2]) / 2,
        "p95": s[min(n - 1, int(n * 0.95))],
        "stddev": math.sqrt(variance),
        "n": n,
    }


def random_title():
    words = ["".join(random.choices(string.ascii_lowercase, k=random.randint(3, 9)))
             for _ in range(random.randint(1, 4))]
    return " ".join(words).title()


class SyntheticPlugin(Plugin):
    """Returns a fixed pool of random titles after a simulated await."""

    def __init__(self, name, size, keyword=None, delay=0.0):
        self.name = name
        self.keyword = keyword
        self.delay = delay
        self.pool = [ResultItem(title=random_title(), arg=i) for i in range(size)]

    async def query(self, args):
        if self.delay:
            await asyncio.sleep(self.delay)
        return list(self.pool)


def build_engine(size):
    plugins = [
        ("bench.apps", SyntheticPlugin("Apps", size), True),
        ("bench.files", SyntheticPlugin("Files", size // 2, delay=0.001), True),
        ("bench.calc", SyntheticPlugin("Calc", 3, keyword="calc"), True),
    ]
    registry = PluginRegistry(
        PluginEntry(describe(p, path, is_core), p) for path, p, is_core in plugins
    )
    aggregator = ResultAggregator(PluginProviders(registry))
    return QueryEngine(QueryRouter(registry.descriptors), aggregator), aggregator


async def bench_query(engine, phrase, runs=RUNS):
    times = []
    for _ in range(runs):
        t0 = time.perf_counter()
        await engine.query(phrase)
        times.append((time.perf_counter() - t0) * 1000)
    return stats(times)


def bench_rank(aggregator, items, keyword, runs=RUNS):
    times = []
    for _ in range(runs):
        t0 = time.perf_counter()
        aggregator.rank(items, keyword)
        times.append((time.perf_counter() - t0) * 1000)
    return stats(times)


async def main():
    log(f"# Dext ranking benchmark ({RUNS} runs)")
    log()
    log("| Pool size | Phrase | Median (ms) | Avg (ms) | p95 (ms) |")
    log("|-----------|--------|-------------|----------|----------|")

    for size in SIZES:
        engine, aggregator = build_engine(size)
        for phrase in PHRASES:
            s = await bench_query(engine, phrase)
            log(f"| {size} | `{phrase}` | {s['median']:.2f} | {s['avg']:.2f} | {s['p95']:.2f} |")

    log()
    log("## Ranking pass only")
    log()
    log("| Items | Median (ms) | Avg (ms) | Stddev |")
    log("|-------|-------------|----------|--------|")
    for size in SIZES:
        _, aggregator = build_engine(size)
        items = [ResultItem(title=random_title()) for _ in range(size)]
        s = bench_rank(aggregator, items, "fire")
        log(f"| {size} | {s['median']:.2f} | {s['avg']:.2f} | {s['stddev']:.2f} |")


if __name__ == "__main__":
    asyncio.run(main())
