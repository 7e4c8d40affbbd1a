"""
Web Search Plugin - Offer a web search for whatever was typed.

A core plugin without a keyword: every phrase produces one
"Search <engine> for <phrase>" item per enabled engine. Alt-activating an
item opens the same search on the next enabled engine.

Engines are configurable via the settings.toml [web_search] section:
    [web_search]
    enabled = ["kagi", "wikipedia"]

    [web_search.engines.kagi]
    name = "Kagi"
    url = "https://kagi.com/search?q={query}"
"""

import html
import urllib.parse
from typing import Any, Dict, Optional

from dext.plugins.base import Plugin
from dext.search.router import ResultItem

# Default search engine URLs (can be overridden in settings.toml)
DEFAULT_ENGINES = {
    "kagi": {"name": "Kagi", "url": "https://kagi.com/search?q={query}", "icon": "web-browser"},
    "google": {"name": "Google", "url": "https://www.google.com/search?q={query}", "icon": "web-browser"},
    "wikipedia": {"name": "Wikipedia", "url": "https://en.wikipedia.org/w/index.php?search={query}", "icon": "accessories-dictionary"},
    "github": {"name": "GitHub", "url": "https://github.com/search?q={query}", "icon": "web-browser"},
    "youtube": {"name": "YouTube", "url": "https://www.youtube.com/results?search_query={query}", "icon": "applications-multimedia"},
}

DEFAULT_ENABLED = ["google", "wikipedia"]


def search_url(engine: dict, search_term: str) -> str:
    return engine["url"].format(query=urllib.parse.quote_plus(search_term))


class WebSearchPlugin(Plugin):
    """Open web search queries in the browser."""

    name = "Web Search"
    action = "open"

    def __init__(self, engines: Optional[dict] = None, enabled: Optional[list] = None):
        self.engines = engines or DEFAULT_ENGINES
        self.enabled = [e for e in (enabled or DEFAULT_ENABLED) if e in self.engines]

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "WebSearchPlugin":
        section = settings.get("web_search", {})
        engines = {**DEFAULT_ENGINES, **section.get("engines", {})}
        return cls(engines=engines, enabled=section.get("enabled"))

    def query(self, args: list[str]) -> list[ResultItem]:
        search_term = " ".join(args).strip()
        if not search_term:
            return []

        results = []
        for i, engine_id in enumerate(self.enabled):
            engine = self.engines[engine_id]
            url = search_url(engine, search_term)
            item = ResultItem(
                title=f"Search {engine['name']} for {search_term}",
                subtitle=engine["url"].split("/")[2],
                arg=url,
                icon=engine.get("icon", "web-browser"),
                text={"copy": url},
                extra={"engine": engine_id},
            )
            if len(self.enabled) > 1:
                next_engine = self.engines[self.enabled[(i + 1) % len(self.enabled)]]
                item.mods = {"alt": {
                    "arg": search_url(next_engine, search_term),
                    "subtitle": f"Search {next_engine['name']} instead",
                }}
            results.append(item)

        return results

    def details(self, item: ResultItem) -> str:
        engine = self.engines.get(item.extra.get("engine"), {})
        return (
            f"<h2>{html.escape(engine.get('name', 'Web'))}</h2>"
            f"<p><a href=\"{html.escape(str(item.arg))}\">{html.escape(str(item.arg))}</a></p>"
        )


PLUGIN_CLASS = WebSearchPlugin
