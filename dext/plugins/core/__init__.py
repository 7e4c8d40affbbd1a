"""
Core plugins - Built-in plugins enabled by name in settings.

Each module exposes PLUGIN_CLASS for the registry loader.
"""
