# Dext Query Engine Package
"""
Keyword-routed launcher query engine.

Components:
  - Search (router, scorer, aggregator): Route a phrase to plugins and rank
    what they return
  - Services (cache, details): Resolve and persist item detail content
  - Plugins: Capability interface, registry and built-in core plugins
"""

__version__ = "0.1.0-dev"
