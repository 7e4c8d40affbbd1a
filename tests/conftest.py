"""
Shared test fixtures for the Dext engine test suite.

Provides a temporary detail cache, settings and commands files that use
real file I/O (no mocking of the filesystem), plus recording stub plugins.
"""

import asyncio
import copy

import pytest
import toml

from dext.plugins.base import Plugin
from dext.plugins.providers import PluginProviders
from dext.plugins.registry import PluginEntry, PluginRegistry, describe
from dext.search.router import ResultItem
from dext.services.cache import DetailCache
from dext.utils.helpers import DEFAULT_SETTINGS


class StubPlugin(Plugin):
    """Plugin that records every call and returns canned items."""

    def __init__(self, name, keyword=None, titles=(), helper_titles=("Usage",),
                 details_content="<p>details</p>", delay=0.0, fail=False):
        self.name = name
        self.keyword = keyword
        self.titles = list(titles)
        self.helper_titles = list(helper_titles)
        self.details_content = details_content
        self.delay = delay
        self.fail = fail
        self.query_calls = []
        self.helper_calls = []
        self.details_calls = []

    async def query(self, args):
        self.query_calls.append(list(args))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError(f"{self.name} exploded")
        return [ResultItem(title=t, arg=t) for t in self.titles]

    def helper(self, keyword):
        self.helper_calls.append(keyword)
        return [{"title": t} for t in self.helper_titles]

    async def details(self, item):
        self.details_calls.append(item.title)
        await asyncio.sleep(0)
        return self.details_content


def make_registry(*specs):
    """Build a registry from (path, plugin, is_core) tuples."""
    return PluginRegistry(
        PluginEntry(describe(plugin, path, is_core), plugin)
        for path, plugin, is_core in specs
    )


@pytest.fixture
def core_plugin():
    return StubPlugin("Core", titles=["Firefox", "Files"])


@pytest.fixture
def calc_plugin():
    return StubPlugin("Calc", keyword="calc", titles=["4"])


@pytest.fixture
def registry(core_plugin, calc_plugin):
    return make_registry(
        ("tests.core", core_plugin, True),
        ("tests.calc", calc_plugin, False),
    )


@pytest.fixture
def providers(registry):
    return PluginProviders(registry)


@pytest.fixture
def tmp_cache(tmp_path):
    """Real SQLite detail cache in a temp directory."""
    cache = DetailCache(tmp_path / "cache.db")
    yield cache
    cache.close()


@pytest.fixture
def settings(tmp_path):
    """Default settings pointed at temp files, with a short debounce."""
    data = copy.deepcopy(DEFAULT_SETTINGS)
    data["search"]["debounce_ms"] = 20
    data["cache"]["path"] = str(tmp_path / "cache.db")
    data["plugins"]["commands_file"] = str(tmp_path / "commands.toml")
    return data


@pytest.fixture
def tmp_settings(tmp_path):
    """Create a real settings TOML file with all sections."""
    settings_path = tmp_path / "settings.toml"
    data = {
        "search": {"max_results": 5, "debounce_ms": 50},
        "plugins": {"core": ["calculator"], "user": []},
        "web_search": {"enabled": ["kagi"]},
    }
    settings_path.write_text(toml.dumps(data))
    return settings_path


@pytest.fixture
def tmp_commands(tmp_path):
    """Create a real commands TOML file with test entries."""
    commands_path = tmp_path / "commands.toml"
    data = {
        "commands": {
            "lock": {
                "description": "Lock screen",
                "exec": "hyprlock",
                "icon": "system-lock-screen",
            },
            "suspend": {
                "description": "Suspend system",
                "exec": "systemctl suspend",
                "icon": "system-suspend",
            },
        }
    }
    commands_path.write_text(toml.dumps(data))
    return commands_path
