# Dext Utilities Package
"""
Shared utility functions and helpers for the Dext engine.
"""

from .debounce import Debouncer, debounce
from .helpers import get_own_prop, load_settings, setup_logging

__all__ = ["Debouncer", "debounce", "get_own_prop", "load_settings", "setup_logging"]
