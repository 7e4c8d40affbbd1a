# Dext Services Package
"""
Backend services for the Dext engine.

Services handle detail resolution and its persistence.
"""

from .cache import CacheNamespace, DetailCache, cache_namespace
from .details import DetailResolver

__all__ = ["CacheNamespace", "DetailCache", "DetailResolver", "cache_namespace"]
