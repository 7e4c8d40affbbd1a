"""Exception types raised by the engine."""


class DextError(Exception):
    """Base class for engine errors."""


class MalformedItemError(DextError):
    """A plugin returned a result item that cannot be ranked."""


class UnknownPluginError(DextError):
    """An item refers to a plugin that is not in the registry."""


class UnknownMessageError(DextError):
    """No handler is registered for a message kind."""


class PluginLoadError(DextError):
    """A user plugin could not be imported or instantiated."""
